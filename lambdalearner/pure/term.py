"""Pure lambda calculus term tree.

```
<λ-term> ::= <variable>                 ; bound (id of its binder) or free (id 0)
           | "λ" <variable> "." <λ-term> ; "abstraction", every binder instance has a unique id
           | <λ-term> <λ-term>          ; "application", associating by left: abcd = (((a b) c) d)
```

Every node owns its children and keeps a weak, non-owning reference to its parent. Parent links are only used for
navigation: finding the slot a variable occupies during substitution, or walking up to a variable's binder. Because
the links are weak, a subtree that is spliced out of the tree during reduction is simply dropped.

Variables are resolved by id, not by name. Names are kept for display and for detecting clashes that would make the
printed form ambiguous (see reducer.py).
"""

from abc import ABC, abstractmethod
import weakref


class LambdaTerm(ABC):
    """Superclass of the three term variants. The set of variants is closed: Variable, Abstraction, Application."""

    def __init__(self):
        self._parent = None
        self._cls = type(self).__name__

    @property
    def parent(self):
        """Parent term, or None for a root (or a detached subtree)."""
        return self._parent() if self._parent is not None else None

    @parent.setter
    def parent(self, parent):
        self._parent = weakref.ref(parent) if parent is not None else None

    @property
    @abstractmethod
    def nodes(self):
        """Child terms, in left-to-right order."""

    @abstractmethod
    def clone(self, parent=None):
        """Deep, fully independent copy of this term. Ids are preserved."""

    @abstractmethod
    def rename(self, new_name, new_id, root_id):
        """Renames the binder with id root_id and every variable it binds. Does not descend into a nested binder that
        carries the same id (a clone of the same binder shadows it).
        """

    @abstractmethod
    def replace_child(self, old, new):
        """Puts new into the slot occupied by old (compared by identity) and anchors it to self."""

    def bound_vars(self):
        """Every bound variable in this subtree, left to right."""
        return [var for var in self.variables() if not var.is_free]

    def bound_var_names(self):
        return {var.name for var in self.bound_vars()}

    def variables(self):
        """Every variable occurrence in this subtree, left to right."""
        found = []
        stack = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, Variable):
                found.append(node)
            else:
                stack.extend(reversed(node.nodes))
        return found

    def binders(self):
        """Every abstraction in this subtree (self included), in pre-order."""
        found = []
        stack = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, Abstraction):
                found.append(node)
            stack.extend(reversed(node.nodes))
        return found

    def names(self):
        """Every variable and binder name that occurs in this subtree."""
        return {var.name for var in self.variables()} | {abs_.name for abs_ in self.binders()}

    def root(self):
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def alpha_equals(self, other):
        """Whether or not self and other are the same term up to the names of bound variables. Free variables must
        match by name.
        """

        def _alpha_equals(term, other, depth, binders, other_binders):
            if isinstance(term, Variable) and isinstance(other, Variable):
                if term.id not in binders or other.id not in other_binders:
                    # free, or bound outside of the compared terms
                    return term.id not in binders and other.id not in other_binders and term.name == other.name
                return binders[term.id] == other_binders[other.id]

            elif isinstance(term, Abstraction) and isinstance(other, Abstraction):
                binders = {**binders, term.id: depth}
                other_binders = {**other_binders, other.id: depth}
                return _alpha_equals(term.body, other.body, depth + 1, binders, other_binders)

            elif isinstance(term, Application) and isinstance(other, Application):
                return (_alpha_equals(term.function, other.function, depth, binders, other_binders)
                        and _alpha_equals(term.argument, other.argument, depth, binders, other_binders))

            return False

        return _alpha_equals(self, other, 0, {}, {})

    def display(self, indents=0):
        """Recursively displays the term tree in a readable format.

        Format:
        <LambdaTerm>(<label>, nodes=[
            <LambdaTerm>(<label>, nodes=[
                ...
                <LambdaTerm>(<label>)  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{self._cls}({self.label}"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    @property
    def label(self):
        return ""

    def __repr__(self):
        return f"{self._cls}('{self}')"

    def __str__(self):
        from lambdalearner.pure.transform import stringify  # transform imports this module
        return stringify(self)


class Variable(LambdaTerm):
    """Variable occurrence. id is the id of the binding Abstraction, or 0 if the variable is free."""

    def __init__(self, name, id=0):
        super().__init__()
        self._name = name
        self.id = id
        self.free_renamed = False

    @property
    def name(self):
        return self._name

    @property
    def nodes(self):
        return []

    @property
    def is_free(self):
        return self.id == 0

    @property
    def label(self):
        return f"name='{self.name}', id={self.id}"

    def clone(self, parent=None):
        cloned = Variable(self.name, self.id)
        cloned.free_renamed = self.free_renamed
        cloned.parent = parent
        return cloned

    def parent_abstraction(self):
        """Walks up the tree to the Abstraction that binds this variable. Returns None if there is none."""
        current = self.parent
        while current is not None:
            if isinstance(current, Abstraction) and current.id == self.id:
                return current
            current = current.parent
        return None

    def rename_free(self, new_name):
        """Renames a free variable. A variable is never free-renamed twice."""
        self.free_renamed = True
        self._name = new_name

    def rename(self, new_name, new_id, root_id):
        if self.id == root_id:
            self._name = new_name
            self.id = new_id

    def replace_child(self, old, new):
        raise ValueError("variables have no children")


class Abstraction(LambdaTerm):
    """λname.body. id identifies this binder instance: Variables bound by it carry the same id."""

    def __init__(self, name, id, body):
        super().__init__()
        self.name = name
        self.id = id
        self.body = body

    @property
    def body(self):
        return self._body

    @body.setter
    def body(self, body):
        self._body = body
        body.parent = self

    @property
    def nodes(self):
        return [self.body]

    @property
    def label(self):
        return f"name='{self.name}', id={self.id}"

    def clone(self, parent=None):
        cloned = Abstraction(self.name, self.id, self.body.clone())
        cloned.parent = parent
        return cloned

    def rename(self, new_name, new_id, root_id):
        if self.id != root_id:
            self.body.rename(new_name, new_id, root_id)

    def alpha_reduce(self, new_name, new_id):
        """Renames this binder and every variable it binds (α-conversion)."""
        old_id = self.id
        self.name = new_name
        self.id = new_id
        self.body.rename(new_name, new_id, old_id)

    def substitution_sites(self):
        """Variables bound by this abstraction: the slots that a β-reduction fills."""
        sites = []
        stack = [self.body]
        while stack:
            node = stack.pop()
            if isinstance(node, Variable):
                if node.id == self.id:
                    sites.append(node)
            elif not (isinstance(node, Abstraction) and node.id == self.id):
                stack.extend(reversed(node.nodes))
        return sites

    def beta_reduce(self, argument):
        """Substitutes a fresh clone of argument for every variable bound by this abstraction, and returns the
        (detached) body. The caller is responsible for splicing the result back into the tree.
        """
        for var in self.substitution_sites():
            var.parent.replace_child(var, argument.clone())

        body = self.body
        body.parent = None
        return body

    def replace_child(self, old, new):
        if self.body is not old:
            raise ValueError(f"{old!r} is not a child of {self!r}")
        self.body = new


class Application(LambdaTerm):
    """function applied to argument."""

    def __init__(self, function, argument):
        super().__init__()
        self.function = function
        self.argument = argument

    @property
    def function(self):
        return self._function

    @function.setter
    def function(self, function):
        self._function = function
        function.parent = self

    @property
    def argument(self):
        return self._argument

    @argument.setter
    def argument(self, argument):
        self._argument = argument
        argument.parent = self

    @property
    def nodes(self):
        return [self.function, self.argument]

    def clone(self, parent=None):
        cloned = Application(self.function.clone(), self.argument.clone())
        cloned.parent = parent
        return cloned

    def rename(self, new_name, new_id, root_id):
        self.function.rename(new_name, new_id, root_id)
        self.argument.rename(new_name, new_id, root_id)

    def replace_child(self, old, new):
        if self.function is old:
            self.function = new
        elif self.argument is old:
            self.argument = new
        else:
            raise ValueError(f"{old!r} is not a child of {self!r}")
