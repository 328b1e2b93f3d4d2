from .gtfs_repository import IGtfsRepository
from .realtime_feed_client import IRealtimeFeedClient
from .vehicle_feed_decoder import DecodedFeed, DecodedVehicle, IVehicleFeedDecoder

__all__ = [
    "DecodedFeed",
    "DecodedVehicle",
    "IGtfsRepository",
    "IRealtimeFeedClient",
    "IVehicleFeedDecoder",
]
