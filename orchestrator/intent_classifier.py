"""Intent classifier for determining what a chat message asks for."""

import re
from enum import Enum
from typing import Optional, List, Tuple
from pydantic import BaseModel, Field


class IntentKind(str, Enum):
    """Types of user intents."""
    GREETING = "greeting"
    HELP = "help"
    NEWS_REQUEST = "news_request"
    DETAILED_ANALYSIS = "detailed_analysis"
    GENERAL = "general"


class NewsCategory(str, Enum):
    """Topic tags understood by the summarization service."""
    TECHNOLOGY = "technology"
    BUSINESS = "business"
    POLITICS = "politics"
    SPORTS = "sports"
    ENTERTAINMENT = "entertainment"
    SCIENCE = "science"
    HEALTH = "health"


class SummaryLength(str, Enum):
    """Summary depth for detailed analysis."""
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


MAX_KEYWORDS = 5


class IntentDescriptor(BaseModel):
    """Parsed user intent."""
    kind: IntentKind = Field(description="Type of intent detected")
    raw_query: str = Field(default="", description="Original user query")
    category: Optional[NewsCategory] = Field(default=None, description="Topic filter, None for unfiltered")
    article_count: Optional[int] = Field(default=None, gt=0, description="Explicit number of articles requested")
    summary_length: Optional[SummaryLength] = Field(default=None, description="Requested summary depth")
    focus_areas: List[str] = Field(default_factory=list, max_length=MAX_KEYWORDS)
    keywords: List[str] = Field(default_factory=list, max_length=MAX_KEYWORDS)

    @property
    def category_tag(self) -> str:
        """Category as sent to the service, empty string meaning no filter."""
        return self.category.value if self.category else ""


def _words(*words: str) -> str:
    """Alternation of latin words that only match as whole words (optional plural s)."""
    return r"(?<![a-z])(?:" + "|".join(words) + r")s?(?![a-z])"


class IntentClassifier:
    """
    Classifies user messages into intents using pattern matching.

    The first matching kind in GREETING, HELP, DETAILED_ANALYSIS, NEWS_REQUEST
    order wins; anything else is GENERAL. Mixed messages (help words next to
    news words) are resolved by that order alone.
    """

    GREETING_PATTERN = r"^(?:你好|您好|嗨|哈喽|早上好|上午好|中午好|下午好|晚上好|hi(?![a-z])|hello(?![a-z])|hey(?![a-z])|good (?:morning|afternoon|evening)(?![a-z]))"

    HELP_PATTERN = r"帮助|怎么用|如何使用|功能|使用说明|" + _words("help", r"how to use", r"what can you do")

    ANALYSIS_PATTERN = r"分析|深度|详细|趋势|洞察|报告|" + _words(
        "analy[sz]e", "analysis", "trend", "insight", "report", r"in-?depth", r"deep ?dive",
    )

    NEWS_PATTERN = r"新闻|消息|资讯|动态|最新|今天|昨天|头条|" + _words(
        "news", "update", "latest", "today", "yesterday", "headline",
    )

    # Ordered, first match wins
    CATEGORY_PATTERNS: List[Tuple[str, NewsCategory]] = [
        (
            r"科技|技术|人工智能|互联网|软件|硬件|数码|"
            + _words("ai", "tech", "technology", "software", "hardware", "internet", "gadget"),
            NewsCategory.TECHNOLOGY,
        ),
        (
            r"商业|经济|金融|股票|投资|创业|公司|"
            + _words("business", "economy", "finance", "stock", "market", "invest(?:ment)?", "startup", "compan(?:y|ie)"),
            NewsCategory.BUSINESS,
        ),
        (
            r"政治|政府|选举|政策|国际|外交|"
            + _words("politic", "government", "election", "policy", "policie", "diplomacy"),
            NewsCategory.POLITICS,
        ),
        (
            r"体育|运动|足球|篮球|奥运|"
            + _words("sport", "football", "soccer", "basketball", "olympic"),
            NewsCategory.SPORTS,
        ),
        (
            r"娱乐|电影|音乐|明星|游戏|"
            + _words("entertainment", "movie", "film", "music", "celebrit(?:y|ie)", "game"),
            NewsCategory.ENTERTAINMENT,
        ),
        (
            r"科学|研究|发现|实验|学术|"
            + _words("science", "research", "discover(?:y|ie)", "experiment", "academic"),
            NewsCategory.SCIENCE,
        ),
        (
            r"健康|医疗|疫情|病毒|医学|"
            + _words("health", "medical", "pandemic", "virus", "viruse", "medicine"),
            NewsCategory.HEALTH,
        ),
    ]

    SUMMARY_LENGTH_PATTERNS: List[Tuple[str, SummaryLength]] = [
        (r"简短|简要|简单|" + _words("brief", "short", "quick"), SummaryLength.SHORT),
        (r"全面|完整|详细|" + _words("comprehensive", "full", "long", "detailed"), SummaryLength.LONG),
    ]

    PUNCTUATION = r"[？?！!。，,；;：:]"

    STOPWORDS = frozenset({
        # Chinese function words
        "的", "是", "在", "有", "和", "与", "或", "但", "然而", "因为", "所以",
        "这", "那", "什么", "怎么", "为什么", "吗", "呢", "吧",
        # English function words
        "the", "an", "is", "are", "was", "were", "be", "and", "or", "but", "of",
        "to", "in", "on", "at", "for", "with", "about", "from", "by", "as",
        "what", "how", "why", "which", "who", "this", "that", "these", "those",
        "do", "does", "did", "can", "me", "my", "you", "your", "it", "its",
        "any", "some", "there", "please",
    })

    def __init__(self):
        """Initialize classifier with compiled patterns."""
        self.greeting = re.compile(self.GREETING_PATTERN, re.IGNORECASE)
        self.help = re.compile(self.HELP_PATTERN, re.IGNORECASE)
        self.analysis = re.compile(self.ANALYSIS_PATTERN, re.IGNORECASE)
        self.news = re.compile(self.NEWS_PATTERN, re.IGNORECASE)
        self.categories = [
            (re.compile(pattern, re.IGNORECASE), category)
            for pattern, category in self.CATEGORY_PATTERNS
        ]
        self.summary_lengths = [
            (re.compile(pattern, re.IGNORECASE), length)
            for pattern, length in self.SUMMARY_LENGTH_PATTERNS
        ]
        self.punctuation = re.compile(self.PUNCTUATION)
        self.number = re.compile(r"\d+")

    def classify(self, message: str) -> IntentDescriptor:
        """
        Classify user message into an intent.

        Args:
            message: User's message

        Returns:
            IntentDescriptor; unmatched input falls through to GENERAL
        """
        raw = message or ""
        text = raw.lower()

        if self.greeting.search(text.lstrip()):
            return IntentDescriptor(kind=IntentKind.GREETING, raw_query=raw)

        if self.help.search(text):
            return IntentDescriptor(kind=IntentKind.HELP, raw_query=raw)

        if self.analysis.search(text):
            keywords = self.extract_keywords(text)
            return IntentDescriptor(
                kind=IntentKind.DETAILED_ANALYSIS,
                raw_query=raw,
                category=self.extract_category(text),
                summary_length=self.extract_summary_length(text),
                focus_areas=keywords,
                keywords=list(keywords),
            )

        if self.news.search(text):
            return IntentDescriptor(
                kind=IntentKind.NEWS_REQUEST,
                raw_query=raw,
                category=self.extract_category(text),
                article_count=self._positive(self.extract_number(text)),
                keywords=self.extract_keywords(text),
            )

        return IntentDescriptor(
            kind=IntentKind.GENERAL,
            raw_query=raw,
            keywords=self.extract_keywords(text),
        )

    def extract_category(self, text: str) -> Optional[NewsCategory]:
        """Return the first category whose keywords appear in the text."""
        for pattern, category in self.categories:
            if pattern.search(text):
                return category
        return None

    def extract_keywords(self, text: str) -> List[str]:
        """Split text into content words, dropping punctuation and stopwords."""
        words = self.punctuation.sub(" ", text.lower()).split()
        keywords = [
            word for word in words
            if len(word) > 1 and word not in self.STOPWORDS
        ]
        return keywords[:MAX_KEYWORDS]

    def extract_number(self, text: str) -> Optional[int]:
        """First run of digits in the text, if any. Runs too long to convert count as none."""
        match = self.number.search(text)
        if not match:
            return None
        try:
            return int(match.group(0))
        except ValueError:
            return None

    def extract_summary_length(self, text: str) -> Optional[SummaryLength]:
        for pattern, length in self.summary_lengths:
            if pattern.search(text):
                return length
        return None

    @staticmethod
    def _positive(number: Optional[int]) -> Optional[int]:
        return number if number and number > 0 else None
