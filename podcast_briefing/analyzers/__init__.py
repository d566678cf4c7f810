from .clusterer import TopicClusterer
from .summarizer import ArticleSummarizer, parse_summary_response

__all__ = ["ArticleSummarizer", "TopicClusterer", "parse_summary_response"]
