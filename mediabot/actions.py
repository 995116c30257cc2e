from dataclasses import dataclass
from enum import Enum
import re
from typing import Optional

from .models import MediaKind


class Stage(str, Enum):
    SELECT = "select"
    CONFIRM = "confirm"
    CANCEL = "cancel"


class InvalidAction(ValueError):
    pass


_PREFIX_RE = re.compile(r"^(movie|tv|book)_")
_ACTION_RE = re.compile(r"^(?P<kind>movie|tv|book)_(?P<stage>select|confirm|cancel):(?P<session>[^:]+):(?P<index>\d+)$")


@dataclass(frozen=True)
class ActionId:
    """A decoded button custom id: ``{kind}_{stage}:{session_id}:{index}``."""

    kind: MediaKind
    stage: Stage
    session_id: str
    index: int

    def encode(self) -> str:
        return f"{self.kind.value}_{self.stage.value}:{self.session_id}:{self.index}"

    def with_stage(self, stage: Stage) -> "ActionId":
        return ActionId(self.kind, stage, self.session_id, self.index)

    @classmethod
    def parse(cls, custom_id: Optional[str]) -> Optional["ActionId"]:
        """Decode a custom id.

        Returns None for ids that are not ours, raises InvalidAction for ids
        that carry our prefix but are malformed.
        """
        if not custom_id or not _PREFIX_RE.match(custom_id):
            return None
        m = _ACTION_RE.match(custom_id)
        if not m:
            raise InvalidAction(f"Malformed action id: {custom_id!r}")
        return cls(
            kind=MediaKind(m.group("kind")),
            stage=Stage(m.group("stage")),
            session_id=m.group("session"),
            index=int(m.group("index")),
        )
