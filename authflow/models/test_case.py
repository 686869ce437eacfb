"""Test-case records driving flow executions."""

from __future__ import annotations

from typing import ClassVar, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class FlowTestCase(BaseModel):
    """One data-driven case: flow inputs plus the expected terminal state."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Input fields in the order the flow fills them
    INPUT_FIELDS: ClassVar[tuple[str, ...]] = ()

    id: str
    name: str
    expected_state: str = Field(alias="expectedState")
    expected_message: Optional[str] = Field(default=None, alias="expectedMessage")
    expected_error: Optional[str] = Field(default=None, alias="expectedError")

    @property
    def title(self) -> str:
        return f"{self.id}: {self.name}"

    def inputs(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in self.INPUT_FIELDS}


class LoginTestCase(FlowTestCase):
    INPUT_FIELDS: ClassVar[tuple[str, ...]] = ("username", "password")

    username: str = ""
    password: str = ""
    expected_state: Literal["securePage", "loginPageWithError"] = Field(alias="expectedState")


class RegisterTestCase(FlowTestCase):
    INPUT_FIELDS: ClassVar[tuple[str, ...]] = ("username", "password", "confirm_password")

    username: str = ""
    password: str = ""
    confirm_password: str = Field(default="", alias="confirmPassword")
    expected_state: Literal["loginPage", "registerPageWithError"] = Field(alias="expectedState")
