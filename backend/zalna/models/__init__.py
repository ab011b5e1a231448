from zalna.models.user import User
from zalna.models.hall import Hall, HallUserRole
from zalna.models.pricing import HallAddon, HallBlockedDate, HallProduct, HallProductRate
from zalna.models.media import Media, MediaTag, MediaTagType
from zalna.models.host_application import HostApplication

__all__ = [
    "Hall",
    "HallAddon",
    "HallBlockedDate",
    "HallProduct",
    "HallProductRate",
    "HallUserRole",
    "HostApplication",
    "Media",
    "MediaTag",
    "MediaTagType",
    "User",
]
