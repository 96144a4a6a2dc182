from pydantic import Field

from cardscope.domain.shared.model.value import ValueObject


class LoadSizePolicy(ValueObject):
    """Batch sizes that grow with the number of batches already taken.

    Batch 1 is small for a fast first paint, batches 2 through
    ``middle_batches_until`` are medium, later ones large. While restoring,
    the size is the remaining distance to the target, capped at
    ``restore_batch_max``.
    """

    first_batch: int = Field(default=24, ge=1)
    middle_batch: int = Field(default=72, ge=1)
    middle_batches_until: int = Field(default=3, ge=1)
    later_batch: int = Field(default=144, ge=1)
    restore_batch_max: int = Field(default=400, ge=1)

    def batch_size(self, batches_taken: int, remaining: int | None = None) -> int:
        if remaining is not None:
            return max(1, min(self.restore_batch_max, remaining))
        number = batches_taken + 1
        if number == 1:
            return self.first_batch
        if number <= self.middle_batches_until:
            return self.middle_batch
        return self.later_batch
