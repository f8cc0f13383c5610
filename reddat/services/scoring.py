from dataclasses import dataclass
from typing import Any


CONTROVERSIAL_THRESHOLD = 0.2


@dataclass(frozen=True)
class Score:
    """Net score of a link, captured from its vote counters at read time.

    Two scores with the same (upvotes, downvotes) pair are equal and hash
    the same, whichever link they came from.
    """

    upvotes: int
    downvotes: int

    @classmethod
    def of(cls, link: Any) -> "Score":
        return cls(upvotes=int(link.upvotes or 0), downvotes=int(link.downvotes or 0))

    @property
    def value(self) -> int:
        return self.upvotes - self.downvotes

    @property
    def controversial(self) -> bool:
        high = max(self.upvotes, self.downvotes)
        if high == 0:
            # no votes at all is not a controversy
            return False
        return abs(self.value) / high < CONTROVERSIAL_THRESHOLD

    def formatted(self) -> str:
        return f"{self.value} (+{self.upvotes}, -{self.downvotes})"


def formatted_score_for(item: Any) -> str:
    score = item if isinstance(item, Score) else Score.of(item)
    return score.formatted()
