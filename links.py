# links.py
from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit

FILM_SEGMENT = "film"


@dataclass(frozen=True)
class FilmUrl:
    """A canonical Letterboxd film URL split around its `/film/` segment.

    `base` is everything before the segment (scheme, host and any leading
    path), `slug` is the film path that follows it, without slashes at
    either end.
    """
    base: str
    slug: str

    @classmethod
    def parse(cls, url: str) -> "FilmUrl":
        parts = urlsplit(url)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"Not an absolute URL: {url!r}")
        segments = [s for s in parts.path.split("/") if s]
        if FILM_SEGMENT not in segments:
            raise ValueError(f"No /{FILM_SEGMENT}/ segment in {url!r}")
        index = segments.index(FILM_SEGMENT)
        slug = "/".join(segments[index + 1:])
        if not slug:
            raise ValueError(f"No film slug in {url!r}")
        prefix = "".join(f"/{s}" for s in segments[:index])
        base = urlunsplit((parts.scheme, parts.netloc, prefix, "", ""))
        return cls(base=base, slug=slug)

    def friends(self, username: str, value: str) -> str:
        return f"{self.base}/{username}/friends/{FILM_SEGMENT}/{self.slug}/{value}"

    def user(self, username: str, value: str) -> str:
        return f"{self.base}/{username}/{FILM_SEGMENT}/{self.slug}/{value}"
