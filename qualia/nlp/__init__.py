"""Text processing: vocabulary, tokenizer, inference backends and scoring."""

from .vocabulary import Vocabulary, VocabularyError, load_vocabulary
from .tokenizer import BertTokenizer, TokenSequence, basic_tokenize
from .inference import HttpInferenceAdapter, InferenceAdapter, StaticInferenceAdapter, TorchInferenceAdapter
from .taggers import LexiconTagger, SentimentTagger, VaderTagger
from .language import LanguageDetector, ScriptLanguageDetector
from .scorer import (
    BertProvider,
    RuleBasedProvider,
    SentimentProvider,
    SentimentScorer,
    load_sentiment_provider,
    softmax,
)

__all__ = [
    "BertProvider",
    "BertTokenizer",
    "HttpInferenceAdapter",
    "InferenceAdapter",
    "LanguageDetector",
    "LexiconTagger",
    "RuleBasedProvider",
    "ScriptLanguageDetector",
    "SentimentProvider",
    "SentimentScorer",
    "SentimentTagger",
    "StaticInferenceAdapter",
    "TokenSequence",
    "TorchInferenceAdapter",
    "VaderTagger",
    "Vocabulary",
    "VocabularyError",
    "basic_tokenize",
    "load_sentiment_provider",
    "load_vocabulary",
    "softmax",
]
