from typing import Optional
from bs4 import BeautifulSoup
import logging
import re
import unicodedata

import trafilatura


logger = logging.getLogger(__name__)

# Embedded document boundaries inside an EDGAR submission
HTML_REGION_PATTERN = re.compile(r'<html\b[^>]*>.+?</html>', re.IGNORECASE | re.DOTALL)
TEXT_REGION_PATTERN = re.compile(r'<text\b[^>]*>(.+?)</text>', re.IGNORECASE | re.DOTALL)
TAG_PATTERN = re.compile(r'<[/A-Za-z].*?>')

NOISE_CHARACTERS = frozenset('*_☐☑☒')
KEPT_CHARACTERS = frozenset('().,\'"/\n')
KEPT_CATEGORIES = frozenset(['Lu', 'Ll', 'Lt', 'Lm', 'Lo', 'Nd', 'Nl',
                             'Zs', 'Zl', 'Zp',
                             'Pc', 'Pd', 'Ps', 'Pe', 'Pi', 'Pf', 'Po'])

BOILERPLATE_TAGS = ['script', 'style', 'noscript', 'head', 'nav', 'header', 'footer',
                    'aside', 'form', 'menu', 'iframe', 'svg', 'template']
BOILERPLATE_ROLES = ['navigation', 'banner', 'contentinfo', 'menu']
BLOCK_TAGS = ['p', 'div', 'br', 'tr', 'li', 'table', 'section', 'article', 'blockquote',
              'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'pre', 'dt', 'dd', 'hr', 'center']
HIDDEN_STYLE_PATTERN = re.compile(r'display\s*:\s*none', re.IGNORECASE)


class SoupContentExtractor:
    """Main-content heuristic: drop boilerplate elements, keep block structure."""

    def extract(self, markup: str) -> str:
        soup = BeautifulSoup(markup, 'html.parser')

        for element in soup.find_all(BOILERPLATE_TAGS):
            element.extract()
        for element in soup.find_all(attrs={'role': BOILERPLATE_ROLES}):
            element.extract()
        # inline XBRL keeps its header facts in hidden blocks
        for element in soup.find_all(style=HIDDEN_STYLE_PATTERN):
            element.extract()

        for element in soup.find_all(BLOCK_TAGS):
            element.insert_after('\n')

        return soup.get_text()


class TrafilaturaContentExtractor:

    def __init__(self, fallback: Optional[SoupContentExtractor] = None):
        self.fallback = fallback or SoupContentExtractor()

    def extract(self, markup: str) -> str:
        text = trafilatura.extract(markup, include_comments=False, include_tables=True)
        if text:
            return text
        logger.debug("trafilatura found no main content, using soup extraction")
        return self.fallback.extract(markup)


CONTENT_EXTRACTORS = {
    'soup': SoupContentExtractor,
    'trafilatura': TrafilaturaContentExtractor,
}


def build_content_extractor(name: str):
    try:
        return CONTENT_EXTRACTORS[name]()
    except KeyError:
        raise ValueError(f"Unknown content extractor {name!r}, expected one of {sorted(CONTENT_EXTRACTORS)}")


class DocumentTextProcessor:

    def __init__(self, content_extractor=None):
        self.content_extractor = content_extractor or SoupContentExtractor()

    def _select_region(self, document: str) -> str:
        html_match = HTML_REGION_PATTERN.search(document)
        if html_match:
            return self.content_extractor.extract(html_match.group(0))

        text_match = TEXT_REGION_PATTERN.search(document)
        if text_match:
            return TAG_PATTERN.sub('', text_match.group(1))

        return document

    def _keep_character(self, character: str) -> bool:
        if character in KEPT_CHARACTERS:
            return True
        if character in NOISE_CHARACTERS:
            return False
        return unicodedata.category(character) in KEPT_CATEGORIES

    def _normalize_text(self, text: str) -> str:
        text = text.replace('\r\n', '\n').replace('\r', '\n').replace('\t', ' ')
        text = ''.join(character for character in text if self._keep_character(character))

        cleaned_lines = []
        for line in text.split('\n'):
            if not any(character.isalpha() for character in line):
                continue
            cleaned_lines.append(' '.join(line.split()))
        return '\n'.join(cleaned_lines)

    def extract_text(self, raw: bytes) -> str:
        document = raw.decode('utf-8', errors='replace')
        return self._normalize_text(self._select_region(document))
