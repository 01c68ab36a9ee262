"""Views of the marina hub and the string keys that name them.

Keys are the only form a view takes outside this module; everything
inside works with the typed variants below.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from marina.domain.models import WaitlistType


class LandingView(BaseModel):
    kind: Literal["landing"] = "landing"


class CalendarView(BaseModel):
    kind: Literal["calendar"] = "calendar"


class TodoListView(BaseModel):
    kind: Literal["todos"] = "todos"


class WaitlistView(BaseModel):
    kind: Literal["waitlist"] = "waitlist"
    waitlist_type: WaitlistType


class ComingSoonView(BaseModel):
    kind: Literal["coming_soon"] = "coming_soon"
    feature: str


View = Annotated[
    Union[LandingView, CalendarView, TodoListView, WaitlistView, ComingSoonView],
    Field(discriminator="kind"),
]
view_adapter: TypeAdapter[View] = TypeAdapter(View)

WAITLIST_KEYS: dict[str, WaitlistType] = {
    "waitlistTransientDocking": WaitlistType.TRANSIENT_DOCKING,
    "waitlistSeasonalBoatDockage": WaitlistType.SEASONAL_BOAT_DOCKAGE,
    "waitlistJetSkiDockage": WaitlistType.JET_SKI_DOCKAGE,
    "waitlistIndoorWinterStorage": WaitlistType.INDOOR_WINTER_STORAGE,
    "waitlistOutdoorWinterStorage": WaitlistType.OUTDOOR_WINTER_STORAGE,
}

COMING_SOON_KEYS: dict[str, str] = {
    "seasonalBoatCustomers": "Seasonal Boat Customers",
    "seasonalJetSkiCustomers": "Seasonal Jet Ski Customers",
    "indoorWinterCustomers": "Indoor Winter Customers",
    "outdoorWinterCustomers": "Outdoor Winter Customers",
    "m2mIndoorCustomers": "M2M Indoor Customers",
    "m2mOutdoorCustomers": "M2M Outdoor Customers",
    "dockageMap": "Dockage Map",
}


def decode_view(key: str | None) -> View:
    """Turn a navigation key into a view. Unknown keys land on the hub."""
    if key == "guestDockCalendar":
        return CalendarView()
    if key == "todoList":
        return TodoListView()
    if key in WAITLIST_KEYS:
        return WaitlistView(waitlist_type=WAITLIST_KEYS[key])
    if key in COMING_SOON_KEYS:
        return ComingSoonView(feature=key)
    return LandingView()


def encode_view(view: View) -> str:
    if isinstance(view, CalendarView):
        return "guestDockCalendar"
    if isinstance(view, TodoListView):
        return "todoList"
    if isinstance(view, WaitlistView):
        for key, waitlist_type in WAITLIST_KEYS.items():
            if waitlist_type == view.waitlist_type:
                return key
    if isinstance(view, ComingSoonView):
        return view.feature
    return "landing"


class Tile(BaseModel):
    label: str
    view: str
    coming_soon: bool = False


class Section(BaseModel):
    title: str
    tiles: list[Tile]


def _tile(label: str, key: str) -> Tile:
    return Tile(label=label, view=key, coming_soon=key in COMING_SOON_KEYS)


LANDING_SECTIONS: list[Section] = [
    Section(
        title="Guest & Transient Services",
        tiles=[
            _tile("Guest Dockage Calendar", "guestDockCalendar"),
            _tile("Transient Docking Waitlist", "waitlistTransientDocking"),
        ],
    ),
    Section(
        title="Seasonal Dockage",
        tiles=[
            _tile("Boat Dockage Customers", "seasonalBoatCustomers"),
            _tile("Boat Dockage Waitlist", "waitlistSeasonalBoatDockage"),
            _tile("Jet Ski Dockage Customers", "seasonalJetSkiCustomers"),
            _tile("Jet Ski Dockage Waitlist", "waitlistJetSkiDockage"),
        ],
    ),
    Section(
        title="Winter Storage",
        tiles=[
            _tile("Indoor Storage Customers", "indoorWinterCustomers"),
            _tile("Indoor Storage Waitlist", "waitlistIndoorWinterStorage"),
            _tile("Outdoor Storage Customers", "outdoorWinterCustomers"),
            _tile("Outdoor Storage Waitlist", "waitlistOutdoorWinterStorage"),
        ],
    ),
    Section(
        title="Month-to-Month Storage",
        tiles=[
            _tile("M2M Indoor Customers", "m2mIndoorCustomers"),
            _tile("M2M Outdoor Customers", "m2mOutdoorCustomers"),
        ],
    ),
    Section(
        title="Marina Operations",
        tiles=[
            _tile("To-Do List", "todoList"),
            _tile("Dockage Map (Future)", "dockageMap"),
        ],
    ),
]
