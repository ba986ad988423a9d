"""Fetchers for retrieving bottles and bucket listings from remote hosts."""

from bottle_wrangler.fetchers.base import BaseFetcher
from bottle_wrangler.fetchers.bottle import BottleFetcher
from bottle_wrangler.fetchers.listing import BucketLister

__all__ = [
    "BaseFetcher",
    "BottleFetcher",
    "BucketLister",
]
