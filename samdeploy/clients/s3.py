"""Abstract S3 client interface consumed by the bucket cache."""

from abc import ABC, abstractmethod


class S3AccessError(Exception):
    """Raised when the caller is not authorised to list or inspect buckets."""


class S3Client(ABC):
    """The two S3 operations the deploy wizard needs.

    Implementations own their timeout and retry policy; the bucket cache
    calls :meth:`get_bucket_location` from several threads at once, so
    implementations must be safe for concurrent use.
    """

    @abstractmethod
    def list_buckets(self) -> list[str]:
        """Return the names of every bucket owned by the account.

        Bucket listing is account-wide, not regional.

        Raises:
            S3AccessError: if the credentials may not list buckets.
        """

    @abstractmethod
    def get_bucket_location(self, bucket_name: str) -> str | None:
        """Return the bucket's raw ``LocationConstraint``.

        S3 reports buckets in ``us-east-1`` with an empty constraint and
        some ``eu-west-1`` buckets with the legacy ``EU`` token; callers
        normalise these.
        """
