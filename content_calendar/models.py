from typing import Any, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

ContentKind = Literal["TextBook", "Workbook", "Material", "Video", "Audio", "Homework"]

CONTENT_KINDS: tuple[str, ...] = ("TextBook", "Workbook", "Material", "Video", "Audio", "Homework")

DEFAULT_SUBJECT = "General"
UNKNOWN_SUBJECT = "Unknown Subject"


class SubjectRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(None, validation_alias=AliasChoices("_id", "id"))
    name: Optional[str] = None


class ContentItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., validation_alias=AliasChoices("_id", "id"))
    title: str
    # One of CONTENT_KINDS in practice; other values fall back to default display
    kind: Optional[str] = Field(None, validation_alias=AliasChoices("type", "kind"))
    description: Optional[str] = None
    fileUrl: Optional[str] = None
    # Dates stay raw here; they are parsed when items are bucketed into weeks
    scheduledDate: Optional[Any] = Field(
        None,
        validation_alias=AliasChoices("date", "scheduledDate", "scheduled_date"),
    )
    createdAt: Optional[Any] = Field(
        None,
        validation_alias=AliasChoices("createdAt", "created_at"),
    )
    deadline: Optional[Any] = None
    subject: Optional[Union[SubjectRef, str]] = None
    subjectId: Optional[Union[SubjectRef, str]] = None

    def date_candidates(self) -> List[Any]:
        """Raw values that may serve as primary date, in priority order."""

        return [self.scheduledDate, self.createdAt]

    def subject_name(self, default: str = DEFAULT_SUBJECT) -> str:
        if isinstance(self.subjectId, SubjectRef) and self.subjectId.name:
            return self.subjectId.name
        if isinstance(self.subject, str) and self.subject.strip():
            return self.subject
        if isinstance(self.subject, SubjectRef) and self.subject.name:
            return self.subject.name
        return default


__all__ = [
    "CONTENT_KINDS",
    "ContentItem",
    "ContentKind",
    "DEFAULT_SUBJECT",
    "SubjectRef",
    "UNKNOWN_SUBJECT",
]
