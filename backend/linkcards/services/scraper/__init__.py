from .domain_title import domain_title
from .extractors import RegexMetadataExtractor, SoupMetadataExtractor
from .metadata_scraper import MetadataScraper

__all__ = ['domain_title', 'MetadataScraper', 'RegexMetadataExtractor', 'SoupMetadataExtractor']
