"""Review aggregation models."""

from pydantic import BaseModel, ConfigDict, Field

from portal.models.common import ReviewStance


class ReviewBucket(BaseModel):
    """Reviewers sharing one stance."""

    model_config = ConfigDict(populate_by_name=True)

    number_of_people: int = Field(0, alias="numberOfPeople")
    people: list[str] = Field(default_factory=list)


class ReviewSummary(BaseModel):
    """Server-side aggregate of reviews for one policy."""

    model_config = ConfigDict(extra="ignore")

    confirmed: ReviewBucket = Field(default_factory=ReviewBucket)
    needs_work: ReviewBucket = Field(default_factory=ReviewBucket)

    @property
    def total(self) -> int:
        return self.confirmed.number_of_people + self.needs_work.number_of_people

    def stance_of(self, email: str | None) -> ReviewStance | None:
        """Stance already recorded by the given reviewer, if any."""
        if not email:
            return None
        if email in self.confirmed.people:
            return ReviewStance.confirmed
        if email in self.needs_work.people:
            return ReviewStance.needs_work
        return None
