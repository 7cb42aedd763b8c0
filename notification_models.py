from typing import List, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from relay_errors import MalformedNotificationError

# -----------------------------
# PUSH NOTIFICATION SCHEMA
# -----------------------------


class Ref(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str
    display_id: str = Field(alias="displayId")


class RefChange(BaseModel):
    ref: Ref


class Project(BaseModel):
    key: str


class Repository(BaseModel):
    name: str
    project: Project


class PushNotification(BaseModel):
    changes: List[RefChange] = Field(min_length=1)
    repository: Repository

    @property
    def first_change(self) -> RefChange:
        return self.changes[0]

    @property
    def project_key(self) -> str:
        return self.repository.project.key

    @property
    def repo_name(self) -> str:
        return self.repository.name

    @property
    def branch(self) -> str:
        return self.first_change.ref.display_id


def parse_notification(body: Union[str, bytes]) -> PushNotification:
    try:
        return PushNotification.model_validate_json(body)
    except ValidationError as e:
        raise MalformedNotificationError(
            f"Notification body failed validation: {e.error_count()} error(s)"
        ) from e
