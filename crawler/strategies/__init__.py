from crawler.strategies.ai_extraction import AiExtractionStrategy
from crawler.strategies.base import AttemptResult, ExtractionStrategy
from crawler.strategies.direct_html import DirectHtmlStrategy
from crawler.strategies.reader_proxy import ReaderProxyStrategy

__all__ = [
    "AiExtractionStrategy",
    "AttemptResult",
    "DirectHtmlStrategy",
    "ExtractionStrategy",
    "ReaderProxyStrategy",
]
