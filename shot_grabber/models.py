from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class LoginAuthentication(BaseModel):
    """Log in through a form before capturing."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    method: Literal["login"] = "login"
    url: str = Field(validation_alias=AliasChoices("url", "authenticationUrl"))
    user_selector: str = Field(
        validation_alias=AliasChoices("user_selector", "userFieldSelector")
    )
    pass_selector: str = Field(
        validation_alias=AliasChoices("pass_selector", "passFieldSelector")
    )
    submit_selector: str = Field(
        validation_alias=AliasChoices("submit_selector", "submitSelector")
    )
    success_selector: str = Field(
        validation_alias=AliasChoices("success_selector", "successSelector")
    )
    user: str
    password: Optional[str] = Field(
        None, validation_alias=AliasChoices("password", "pass"), repr=False
    )


class CookieAuthentication(BaseModel):
    """Inject a fixed set of cookies before capturing."""

    model_config = ConfigDict(frozen=True)

    method: Literal["cookie"] = "cookie"
    cookies: list[dict]


AuthenticationSpec = Annotated[
    Union[LoginAuthentication, CookieAuthentication], Field(discriminator="method")
]


class RunConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    report_directory: Path
    log_file: Optional[Path] = None
    batch_size: int = Field(5, ge=1)
    worker_count: int = Field(4, ge=1)
    headless: bool = True
    viewport_width: Optional[int] = Field(None, gt=0)
    viewport_height: Optional[int] = Field(None, gt=0)
    capture_console_log: bool = True
    capture_error_log: bool = True
    capture_screenshot: bool = True
    include_host: bool = True
    verbose: bool = False
    settle_delay: float = Field(5.0, ge=0)
    navigation_timeout: int = Field(30000, ge=0)
    authentication: Optional[AuthenticationSpec] = None
    worker_index: int = 0

    def for_worker(self, index: int) -> "RunConfig":
        return self.model_copy(update={"worker_index": index})


class ErrorInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    message: str

    @classmethod
    def from_exception(cls, error: BaseException) -> "ErrorInfo":
        return cls(type=type(error).__name__, message=str(error))

    def __str__(self) -> str:
        return f"{self.type}: {self.message}"


class PageResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    succeeded: bool
    error: Optional[ErrorInfo] = None
    navigation_timed_out: bool = False


class WorkerReport(BaseModel):
    worker_index: int
    pages: int = 0
    page_errors: list[PageResult] = []


class RunReport(BaseModel):
    total_pages: int
    total_failures: int
    elapsed_seconds: float
    page_errors: list[PageResult] = []

    @property
    def throughput(self) -> float:
        """Urls captured per minute."""
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.total_pages / (self.elapsed_seconds / 60)

    @classmethod
    def from_worker_reports(
        cls, reports: list[WorkerReport], elapsed_seconds: float
    ) -> "RunReport":
        page_errors = [
            result
            for report in sorted(reports, key=lambda r: r.worker_index)
            for result in report.page_errors
        ]
        return cls(
            total_pages=sum(report.pages for report in reports),
            total_failures=len(page_errors),
            elapsed_seconds=elapsed_seconds,
            page_errors=page_errors,
        )
