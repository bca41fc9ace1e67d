from .base import ExtractedFields, Extractor, finish, profile_for, refill_defaults
from .bca import extract_bca
from .bni import extract_bni
from .bri import extract_bri
from .dana import extract_dana
from .generic import extract_generic
from .mandiri import extract_mandiri
from .seabank import extract_seabank

__all__ = [
    "ExtractedFields",
    "Extractor",
    "finish",
    "profile_for",
    "refill_defaults",
    "extract_bca",
    "extract_bri",
    "extract_mandiri",
    "extract_bni",
    "extract_seabank",
    "extract_dana",
    "extract_generic",
]
