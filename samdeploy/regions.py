"""AWS region catalogue used by the region prompt and the bucket cache."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_REGION = "us-east-1"

# Region code -> display name.  Not exhaustive but covers the commercial
# partition regions that support CloudFormation and S3.
AWS_REGIONS = {
    "us-east-1": "US East (N. Virginia)",
    "us-east-2": "US East (Ohio)",
    "us-west-1": "US West (N. California)",
    "us-west-2": "US West (Oregon)",
    "af-south-1": "Africa (Cape Town)",
    "ap-east-1": "Asia Pacific (Hong Kong)",
    "ap-south-1": "Asia Pacific (Mumbai)",
    "ap-south-2": "Asia Pacific (Hyderabad)",
    "ap-northeast-1": "Asia Pacific (Tokyo)",
    "ap-northeast-2": "Asia Pacific (Seoul)",
    "ap-northeast-3": "Asia Pacific (Osaka)",
    "ap-southeast-1": "Asia Pacific (Singapore)",
    "ap-southeast-2": "Asia Pacific (Sydney)",
    "ap-southeast-3": "Asia Pacific (Jakarta)",
    "ca-central-1": "Canada (Central)",
    "eu-central-1": "Europe (Frankfurt)",
    "eu-central-2": "Europe (Zurich)",
    "eu-west-1": "Europe (Ireland)",
    "eu-west-2": "Europe (London)",
    "eu-west-3": "Europe (Paris)",
    "eu-north-1": "Europe (Stockholm)",
    "eu-south-1": "Europe (Milan)",
    "eu-south-2": "Europe (Spain)",
    "me-south-1": "Middle East (Bahrain)",
    "me-central-1": "Middle East (UAE)",
    "sa-east-1": "South America (Sao Paulo)",
}

KNOWN_AWS_REGIONS = frozenset(AWS_REGIONS)


@dataclass(frozen=True)
class RegionInfo:
    """A selectable deployment region."""

    region_code: str
    region_name: str


class RegionProvider:
    """Supplies the regions offered by the region prompt.

    The default catalogue is :data:`AWS_REGIONS`; tests and callers with
    a narrower partition can pass their own mapping.
    """

    def __init__(self, regions: dict[str, str] | None = None):
        self._regions = dict(AWS_REGIONS if regions is None else regions)

    def get_region_data(self) -> list[RegionInfo]:
        return [RegionInfo(region_code=code, region_name=name) for code, name in self._regions.items()]

    def is_known(self, region_code: str) -> bool:
        return region_code in self._regions
