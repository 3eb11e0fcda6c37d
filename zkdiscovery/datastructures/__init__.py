from .metadata import ServiceMetaData
from .service_instance import ServiceInstance, ServiceType

__all__ = ["ServiceInstance", "ServiceMetaData", "ServiceType"]
