from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

    @property
    def is_unset(self) -> bool:
        """(0, 0) is the placeholder written for stores without coordinates."""
        return self.latitude == 0 and self.longitude == 0


UNSET_LOCATION = Location(latitude=0.0, longitude=0.0)


class Item(BaseModel):
    """Item document as stored in the ``items`` collection (camelCase fields)."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    name: str = ""
    category: Optional[str] = None
    description: Optional[str] = None
    store_id: Optional[str] = Field(default=None, alias="storeId")
    price: Optional[str] = None
    in_stock: Optional[bool] = Field(default=None, alias="inStock")
    verified: bool = False
    verified_at: Optional[datetime] = Field(default=None, alias="verifiedAt")
    report_count: int = Field(default=0, alias="reportCount", ge=0)
    deleted: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def _name_default(cls, v):
        return "" if v is None else v

    @field_validator("price", mode="before")
    @classmethod
    def _price_to_str(cls, v):
        # legacy documents store numbers, newer ones strings like "$5.99"
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("verified", "deleted", mode="before")
    @classmethod
    def _flag_default(cls, v):
        return bool(v) if v is not None else False

    @field_validator("report_count", mode="before")
    @classmethod
    def _report_count_default(cls, v):
        if v is None:
            return 0
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return max(0, int(v))
        return v


class StoreRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    address: str
    location: Location
    owner_id: str


class SearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    item: Item
    store: StoreRecord
    distance: Optional[float] = None  # km


class SearchResultOut(BaseModel):
    id: str
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    price: Optional[str] = None
    in_stock: Optional[bool] = None
    verified: bool
    verified_at: Optional[datetime] = None
    report_count: int
    store: StoreRecord
    distance: Optional[float] = None

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResultOut":
        it = result.item
        return cls(
            id=it.id,
            name=it.name,
            category=it.category,
            description=it.description,
            price=it.price,
            in_stock=it.in_stock,
            verified=it.verified,
            verified_at=it.verified_at,
            report_count=it.report_count,
            store=result.store,
            distance=result.distance,
        )


class SearchResponse(BaseModel):
    query: str
    count: int
    results: List[SearchResultOut]


class StoreItemsResponse(BaseModel):
    store_id: str
    count: int
    items: List[Item]
