"""
Change tracking and save planning.

A ChangeSet names the attributes that differ from the last persisted state.
``plan_save`` turns the previous state, the ChangeSet and the candidate
attributes into a SavePlan without touching any store.
"""
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict

from cryptolend.core.documents import BaseDocument


class ChangeSet(BaseModel):
    """Attributes changed relative to the last persisted state"""
    model_config = ConfigDict(frozen=True)

    changed: FrozenSet[str] = frozenset()

    @classmethod
    def of(cls, *fields: str) -> "ChangeSet":
        return cls(changed=frozenset(fields))

    @classmethod
    def between(cls, previous: Optional[Mapping[str, Any]], current: Mapping[str, Any]) -> "ChangeSet":
        """Diff two attribute mappings"""
        if previous is None:
            return cls(changed=frozenset(k for k, v in current.items() if v is not None))
        return cls(changed=frozenset(k for k, v in current.items() if previous.get(k) != v))

    def touches(self, field: str) -> bool:
        return field in self.changed

    def __contains__(self, field: str) -> bool:
        return self.touches(field)

    def union(self, fields: Iterable[str]) -> "ChangeSet":
        return ChangeSet(changed=self.changed | frozenset(fields))


class SavePlan(BaseModel):
    """Stages a save must run besides field validation"""
    model_config = ConfigDict(frozen=True)

    derive: Tuple[str, ...] = ()
    check_unique: Tuple[str, ...] = ()


def plan_save(
    document_type: Type[BaseDocument],
    previous: Optional[Mapping[str, Any]],
    change_set: ChangeSet,
    candidate: Mapping[str, Any]
) -> SavePlan:
    """
    Decide which derivations and uniqueness checks a save needs.

    A derived attribute is recomputed when the document is new or the attribute
    is unset, and whenever the change set names the attribute or its source
    reference. Without a source reference there is nothing to derive from;
    field validation reports it.
    """
    derive = []
    for field, source in document_type.derived_fields.items():
        if candidate.get(source) is None:
            continue
        if (previous is None or change_set.touches(source) or change_set.touches(field)
                or candidate.get(field) is None):
            derive.append(field)

    check_unique = tuple(
        field for field in document_type.unique_fields if candidate.get(field) is not None
    )
    return SavePlan(derive=tuple(derive), check_unique=check_unique)
