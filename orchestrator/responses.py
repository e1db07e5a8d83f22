"""Reply templates and suggested follow-up questions."""

from typing import List, Optional, Sequence

from news_service.schemas import NewsArticle, NewsPayload
from orchestrator.intent_classifier import IntentDescriptor, NewsCategory


GREETING_REPLY = "你好！我是 AI 新闻助手，可以为你提供最新的新闻摘要和分析。你想了解哪方面的新闻呢？"

WELCOME_REPLY = "你好！我是 AI 新闻助手，可以为你提供最新的新闻摘要和深度分析。你想了解哪方面的新闻呢？"

HELP_REPLY = """我可以帮你：
📰 获取最新新闻摘要
🔍 深度分析特定领域新闻
📊 提供新闻趋势洞察
💡 回答新闻相关问题

试试问我："今天有什么科技新闻？" 或 "分析一下AI领域的最新动态\""""

FALLBACK_REPLY = "抱歉，处理你的请求时遇到了问题。请稍后重试或尝试重新表达你的问题。"

EMPTY_AGENT_REPLY = "抱歉，没有获取到有效的回复。"

GENERAL_REPLY = "根据你的问题，我找到了以下相关新闻："

FALLBACK_QUESTIONS = [
    "今天有什么重要新闻？",
    "科技领域最新动态",
    "商业新闻摘要",
]

FOLLOW_UP_QUESTIONS = [
    "今天还有什么重要新闻？",
    "给我详细分析一下",
    "有什么科技新闻吗？",
]

INITIAL_QUESTIONS = [
    "今天有什么重要新闻？",
    "科技领域最新动态",
    "给我分析一下商业新闻",
]

MAX_SUGGESTIONS = 3

CATEGORY_LABELS = {
    NewsCategory.TECHNOLOGY: "科技",
    NewsCategory.BUSINESS: "商业",
    NewsCategory.POLITICS: "政治",
    NewsCategory.SPORTS: "体育",
    NewsCategory.ENTERTAINMENT: "娱乐",
    NewsCategory.SCIENCE: "科学",
    NewsCategory.HEALTH: "健康",
}


def category_label(category: Optional[NewsCategory]) -> str:
    return CATEGORY_LABELS.get(category, "") if category else ""


def build_news_reply(intent: IntentDescriptor, data: NewsPayload) -> str:
    """One-line summary stating how many articles were found and for which category."""
    label = category_label(intent.category)
    category_text = f"{label}领域的" if label else ""
    return f"为你找到了 {len(data.summaries)} 条{category_text}最新新闻："


def build_analysis_reply(intent: IntentDescriptor, data: NewsPayload) -> str:
    """
    Multi-section analysis report.

    Sections, in order: header, statistics overview (article total, categories,
    one line per sentiment label, high-importance count when non-zero, average
    confidence when present), then the AI insight paragraph when present.
    """
    label = category_label(intent.category)
    header = f"{label}领域" if label else "全领域"
    lines = [f"{header}新闻分析报告：", ""]

    insights = data.insights
    if insights:
        total = data.total_articles or len(data.summaries)
        lines.append("📊 统计概览：")
        lines.append(f"• 共分析 {total} 篇文章")
        if insights.categories_found:
            lines.append(f"• 涉及类别：{'、'.join(insights.categories_found)}")

        if insights.sentiment_breakdown:
            lines.append("• 情感分布：")
            for sentiment, count in insights.sentiment_breakdown.items():
                lines.append(f"  - {sentiment}: {count} 篇")

        if insights.high_importance_news > 0:
            lines.append(f"• 高重要度新闻：{insights.high_importance_news} 篇")

        if insights.average_confidence is not None:
            lines.append(f"• 平均置信度：{insights.average_confidence}")

    if data.ai_insights:
        lines.append("")
        lines.append("🤖 AI 洞察：")
        lines.append(data.ai_insights)

    return "\n".join(lines).rstrip()


def generate_suggested_questions(
    intent: Optional[IntentDescriptor],
    articles: Sequence[NewsArticle],
    limit: int = MAX_SUGGESTIONS,
) -> List[str]:
    """
    Follow-up prompts after a successful reply.

    Fixed prompts come first, then one prompt per distinct article category in
    order of first appearance; the combined list is cut to `limit`.
    """
    questions = list(FOLLOW_UP_QUESTIONS)

    seen = set()
    for article in articles:
        category = article.category
        if category and category not in seen:
            seen.add(category)
            questions.append(f"{category}领域还有什么新闻？")

    return questions[:limit]


def fallback_questions() -> List[str]:
    return list(FALLBACK_QUESTIONS)
