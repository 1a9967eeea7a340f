"""User-supplied remote tier credentials."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


DEFAULT_DRIVE_CLIENT_ID = "847857133846-b4h7vsj9i2uk1g6nmj9lqp7c8cul9qgr.apps.googleusercontent.com"


class DriveCredentials(BaseModel):
    """OAuth client id and API key for the drive backend."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    client_id: str = Field(default=DEFAULT_DRIVE_CLIENT_ID, alias="clientId")
    api_key: str = Field(default="", alias="apiKey")

    @model_validator(mode="after")
    def _default_client_id(self) -> "DriveCredentials":
        if not self.client_id:
            self.client_id = DEFAULT_DRIVE_CLIENT_ID
        return self

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id) and bool(self.api_key)


class FirebaseConfig(BaseModel):
    """Six-field project configuration for the document backend."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_key: str = Field(default="", alias="apiKey")
    auth_domain: str = Field(default="", alias="authDomain")
    project_id: str = Field(default="", alias="projectId")
    storage_bucket: str = Field(default="", alias="storageBucket")
    messaging_sender_id: str = Field(default="", alias="messagingSenderId")
    app_id: str = Field(default="", alias="appId")

    @model_validator(mode="after")
    def _default_domains(self) -> "FirebaseConfig":
        if self.project_id:
            if not self.auth_domain:
                self.auth_domain = f"{self.project_id}.firebaseapp.com"
            if not self.storage_bucket:
                self.storage_bucket = f"{self.project_id}.appspot.com"
        return self

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key) and bool(self.project_id)
