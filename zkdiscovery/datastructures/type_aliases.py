"""
Semantic type aliases for zkdiscovery.

Paths, segments and network identities are all plain strings on the wire;
these aliases keep signatures readable about which one is expected.
"""

# Namespace types
type NodePath = str
type PathSegment = str
type ServiceName = str
type FlavorName = str
type InstanceId = str

# Network types
type HostAddress = str
type PortNumber = int

# Registration types
type ParameterKey = str
type ParameterValue = str
type TimestampMilliseconds = int
type DurationSeconds = float
