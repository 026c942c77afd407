"""
Describe locations of pipeline artifacts, either on the local filesystem or
in an object store like Amazon Web Services S3.
"""
import collections
import re

URL_RE = re.compile(r"^(?P<scheme>[A-Za-z][A-Za-z0-9+.-]*)://(?P<rest>.*)$")


def is_remote(fname):
    match = URL_RE.match(fname)
    return bool(match) and match.group("scheme").lower() != "file"


def _clean_parts(parts):
    return [x for p in parts if p for x in p.split("/") if x]


class Location(collections.namedtuple("Location", ["store", "bucket", "key", "region"])):

    """Value type for an artifact location with explicit join semantics.

    Joining never produces doubled or missing separators:

    >>> str(Location.parse("s3://bucket/prefix/").join("S1_1.fastq.gz"))
    's3://bucket/prefix/S1_1.fastq.gz'
    >>> str(Location.parse("/data/stats").join("/S1_1.fastq.stats"))
    '/data/stats/S1_1.fastq.stats'
    """

    __slots__ = ()

    @classmethod
    def parse(cls, filename):
        """Parses a remote or local filename into location information.

        Any `scheme://authority/path` URL keeps its scheme and authority and
        only has the path normalized. Handles S3 with optional region name
        specified in key:
            s3://BUCKETNAME@REGIONNAME/KEY
        """
        match = URL_RE.match(filename)
        if match:
            store = match.group("scheme").lower()
            if store == "file":
                return cls.parse(match.group("rest"))
            parts = match.group("rest").split("/", 1)
            bucket, key = parts if len(parts) == 2 else (parts[0], "")
            region = None
            if store == "s3":
                if bucket.find("@") > 0:
                    bucket, region = bucket.split("@")
                if not bucket:
                    raise ValueError("Missing bucket name in %s" % filename)
            return cls(store, bucket, "/".join(_clean_parts([key])), region)
        key = filename.rstrip("/") or ("/" if filename.startswith("/") else "")
        return cls("file", None, key, None)

    def join(self, *parts):
        """Return a new location with `parts` appended to the key.
        """
        extra = _clean_parts(parts)
        if not extra:
            return self
        if self.store == "file" and self.key.startswith("/"):
            key = "/" + "/".join(_clean_parts([self.key]) + extra)
        else:
            key = "/".join(_clean_parts([self.key]) + extra)
        return self._replace(key=key)

    @property
    def is_remote(self):
        return self.store != "file"

    def __str__(self):
        if self.store == "file":
            return self.key
        region = "@%s" % self.region if self.region else ""
        base = "%s://%s%s" % (self.store, self.bucket, region)
        return "%s/%s" % (base, self.key) if self.key else base
