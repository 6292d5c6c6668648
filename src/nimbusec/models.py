"""Data transfer models for nimbusec API resources.

The models mirror the JSON documents exchanged with the API. They validate
the wire shape only; business rules are enforced by the server.
"""

import calendar
from datetime import datetime, timezone
from typing import Annotated, Any, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
)

ROLE_USER = "user"
ROLE_ADMINISTRATOR = "administrator"


def parse_timestamp(value: Any) -> datetime:
    """Parse a Unix millisecond timestamp, truncating to whole seconds."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"timestamp must be an integer of milliseconds, got {value!r}")
    return datetime.fromtimestamp(int(value) // 1000, tz=timezone.utc)


def format_timestamp(value: datetime) -> int:
    """Format a datetime as Unix milliseconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    seconds = calendar.timegm(value.utctimetuple())
    return seconds * 1000 + value.microsecond // 1000


# Wire format is a bare JSON integer of milliseconds since the epoch.
Timestamp = Annotated[
    datetime,
    PlainValidator(parse_timestamp),
    PlainSerializer(format_timestamp, return_type=int),
]


class NimbusecModel(BaseModel):
    """Base for all resource models: camelCase aliases, tolerant of extra fields."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_payload(self) -> Any:
        """Render the model as a JSON-compatible request body."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Domain(NimbusecModel):
    """A monitored domain."""

    id: Optional[int] = Field(default=None, description="Unique identification of domain")
    bundle: str = Field(default="", description="Id of assigned bundle")
    name: str = Field(default="", description="Name of domain (usually DNS name)")
    scheme: str = Field(default="", description="Whether the domain uses http or https")
    deep_scan: str = Field(
        default="", alias="deepScan", description="Starting point for the deep scan"
    )
    fast_scans: List[str] = Field(
        default_factory=list,
        alias="fastScans",
        description="Landing pages of the domain that are scanned",
    )


class User(NimbusecModel):
    """An account user. Password and signature key are only sent, never read."""

    id: Optional[int] = Field(default=None, description="Unique identification of user")
    login: str = Field(default="", description="Login name of user")
    mail: str = Field(default="", description="Contact for mail notifications")
    role: str = Field(default=ROLE_USER, description="`administrator` or `user`")
    company: str = Field(default="", description="Company name of user")
    surname: str = Field(default="", description="Surname of user")
    forename: str = Field(default="", description="Forename of user")
    title: str = Field(default="", description="Academic title of user")
    mobile: str = Field(default="", description="Contact for sms notifications")
    password: Optional[str] = Field(default=None, description="Only used on create/update")
    signature_key: Optional[str] = Field(
        default=None, alias="signatureKey", description="Secret for SSO"
    )


class Result(NimbusecModel):
    """A scan finding on a domain."""

    id: Optional[int] = None
    # pending, acknowledged, falsepositive, removed
    status: str = ""
    event: str = ""
    category: str = ""
    # 1 = medium to 3 = severe
    severity: int = 0
    probability: float = 0.0
    safe_to_delete: bool = Field(default=False, alias="safeToDelete")
    create_date: Optional[Timestamp] = Field(default=None, alias="createDate")
    last_date: Optional[Timestamp] = Field(default=None, alias="lastDate")

    # detail fields, filled depending on category
    threatname: str = ""
    resource: str = ""
    md5: str = ""
    filesize: int = 0
    owner: str = ""
    group: str = ""
    permission: int = 0
    diff: str = ""
    reason: str = ""


class Bundle(NimbusecModel):
    """A subscription bundle."""

    id: Optional[Union[int, str]] = None
    name: str = ""
    start_date: Optional[Timestamp] = Field(default=None, alias="startDate")
    end_date: Optional[Timestamp] = Field(default=None, alias="endDate")
    quota: str = ""
    depth: int = 0
    fast: int = 0
    deep: int = 0
    contingent: int = 0
    active: int = 0
    engines: List[str] = Field(default_factory=list)
    amount: int = 0
    currency: str = ""


class Token(NimbusecModel):
    """Credentials issued to a server agent."""

    id: Optional[int] = None
    name: str = ""
    key: str = ""
    secret: str = ""
    last_call: Optional[Timestamp] = Field(default=None, alias="lastCall")
    version: int = 0


class Agent(NimbusecModel):
    """A downloadable server agent binary."""

    os: str = ""
    arch: str = ""
    version: int = 0
    md5: str = ""
    sha1: str = ""
    format: str = ""
    url: str = ""

    @property
    def filename(self) -> str:
        return f"nimbusagent-{self.os}-{self.arch}-v{self.version}.{self.format}"


class BillingChange(NimbusecModel):
    """One entry of a domain's billing history."""

    time: Timestamp
    bundle: str = ""
    amount: int = 0
    currency: str = ""
    reason: str = ""


class DomainEvent(NimbusecModel):
    """One entry of a domain's event log."""

    time: Optional[Timestamp] = None
    event: str = ""
    human: str = ""
    remote: str = ""
