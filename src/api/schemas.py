"""Request/response Pydantic models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr


class AnalyzeRequest(BaseModel):
    url: str


class SendReportRequest(BaseModel):
    email: EmailStr


class CheckStat(BaseModel):
    model_config = ConfigDict(frozen=True)

    passed: int = 0
    total: int = 0


class ReportSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    average_score: int = 0
    check_stats: dict[str, CheckStat] = {}


class CheckFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    details: str


class CheckDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    passed_count: int = 0
    total_count: int = 0
    failures: tuple[CheckFailure, ...] = ()


class AggregateReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: ReportSummary = ReportSummary()
    detailed_report: dict[str, CheckDetail] = {}
    pages_crawled: int = 0


class StoredReport(BaseModel):
    report_id: str
    url: str
    report: AggregateReport
    created_at: datetime
    expires_at: datetime | None = None


class AnalyzeResponse(BaseModel):
    report_id: str | None = None
    url: str
    pages_crawled: int
    summary: ReportSummary
    interpretation: str = ""


class SendReportResponse(BaseModel):
    status: str = "sent"
    report_id: str
    email: EmailStr
