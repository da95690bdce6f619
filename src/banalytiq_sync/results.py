from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class FailureKind(Enum):
    NOT_FOUND = 'not_found'
    TRANSACTION = 'transaction'


@dataclass(frozen=True)
class MergeSuccess:
    inserted_count: int
    retired: bool = False
    warning: Optional[str] = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class MergeFailure:
    kind: FailureKind
    detail: str

    @property
    def ok(self) -> bool:
        return False


MergeResult = Union[MergeSuccess, MergeFailure]
