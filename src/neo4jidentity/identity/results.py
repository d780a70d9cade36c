from typing import List

from pydantic import BaseModel, Field


class IdentityResult(BaseModel):
    """Outcome of a store write."""

    succeeded: bool
    errors: List[str] = Field(default_factory=list)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: str) -> "IdentityResult":
        return cls(succeeded=False, errors=list(errors))

    def __bool__(self) -> bool:
        return self.succeeded
