"""Intent classification backends."""

from homedash.config import ClassifierConfig
from homedash.errors import ConfigError
from homedash.nlu.types import ClassificationResult, IntentClassifier


def make_classifier(config: ClassifierConfig) -> IntentClassifier:
    """Build the classifier selected by ``config.backend``."""
    if config.backend == "litellm":
        from homedash.nlu.llm import LitellmClassifier

        return LitellmClassifier(config)
    if config.backend == "dialogflow":
        from homedash.nlu.dialogflow import DialogflowClassifier

        return DialogflowClassifier(config)
    raise ConfigError(f"unknown classifier backend: {config.backend!r}")


__all__ = ["ClassificationResult", "IntentClassifier", "make_classifier"]
