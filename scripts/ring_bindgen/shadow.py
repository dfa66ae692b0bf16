"""
Shadow resolution module

Scans every impl block once, before any code is generated, and records
which structs define their own `new` and which methods exist. Generators
consult the resulting index to skip the default constructor and any
field accessor a user method already provides.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ir import BindingUnit


@dataclass(frozen=True)
class ShadowIndex:
    """Method facts for one binding unit, read-only once built"""
    custom_new: frozenset[str] = frozenset()
    methods: frozenset[tuple[str, str]] = frozenset()

    @classmethod
    def resolve(cls, unit: 'BindingUnit') -> 'ShadowIndex':
        """Collect the facts from all impl blocks of unit"""
        custom_new = set()
        methods = set()
        for impl in unit.impls():
            for method in impl.methods:
                if method.name == 'new':
                    custom_new.add(impl.struct)
                methods.add((impl.struct, method.name))
        return cls(frozenset(custom_new), frozenset(methods))

    def has_custom_new(self, struct_name: str) -> bool:
        return struct_name in self.custom_new

    def has_method(self, struct_name: str, method_name: str) -> bool:
        return (struct_name, method_name) in self.methods

    def getter_shadowed(self, struct_name: str, field_name: str) -> bool:
        """A `get_<field>` or `<field>` method replaces the getter"""
        return (self.has_method(struct_name, f'get_{field_name}')
                or self.has_method(struct_name, field_name))

    def setter_shadowed(self, struct_name: str, field_name: str) -> bool:
        """Only a `set_<field>` method replaces the setter"""
        return self.has_method(struct_name, f'set_{field_name}')
