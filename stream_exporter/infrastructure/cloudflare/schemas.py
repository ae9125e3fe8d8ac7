"""Wire shapes of the Cloudflare REST and GraphQL responses we consume."""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from stream_exporter.domain.models import Account, TimeBucketSample


class ApiMessage(BaseModel):
    code: Optional[int] = None
    message: str = ""


class ResultInfo(BaseModel):
    page: int = 1
    per_page: int = 0
    total_pages: int = 1
    count: int = 0
    total_count: int = 0


class AccountsEnvelope(BaseModel):
    """``GET /accounts`` response."""

    success: bool
    errors: List[ApiMessage] = Field(default_factory=list)
    result: Optional[List[Account]] = None
    result_info: Optional[ResultInfo] = None


class MinutesViewedTotals(BaseModel):
    minutes_viewed: int = Field(alias="minutesViewed")


class BucketDimensions(BaseModel):
    ts: datetime


class MinutesViewedGroup(BaseModel):
    totals: MinutesViewedTotals = Field(alias="sum")
    dimensions: BucketDimensions

    def to_sample(self) -> TimeBucketSample:
        return TimeBucketSample(
            timestamp=self.dimensions.ts,
            minutes_viewed=self.totals.minutes_viewed,
        )


class ViewerAccount(BaseModel):
    groups: List[MinutesViewedGroup] = Field(
        default_factory=list, alias="streamMinutesViewedAdaptiveGroups"
    )


class Viewer(BaseModel):
    accounts: List[ViewerAccount] = Field(default_factory=list)


class StreamAnalyticsData(BaseModel):
    viewer: Viewer


class GraphQLError(BaseModel):
    message: str = ""
    path: Optional[List[Any]] = None


class StreamAnalyticsEnvelope(BaseModel):
    data: Optional[StreamAnalyticsData] = None
    errors: Optional[List[GraphQLError]] = None

    def samples(self) -> List[TimeBucketSample]:
        if self.data is None:
            return []
        return [
            group.to_sample()
            for account in self.data.viewer.accounts
            for group in account.groups
        ]
