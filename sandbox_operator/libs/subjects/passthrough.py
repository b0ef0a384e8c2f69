"""
Passthrough Subject Resolver

Treats every owner identifier literally as a User subject.
"""

from typing import List, Sequence

from ..core.models import Subject


class PassthroughSubjectResolver:
    """Maps each identifier to ``Subject(kind=User, name=identifier)`` in order"""

    def resolve(self, identifiers: Sequence[str]) -> List[Subject]:
        return [Subject(name=identifier) for identifier in identifiers]

    def __repr__(self) -> str:
        return "PassthroughSubjectResolver()"
