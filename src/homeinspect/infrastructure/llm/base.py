"""Base LLM provider interface"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from homeinspect.domain.config.llm import LLMConfig
from homeinspect.domain.prompts.messages import Message


class FragmentStream:
    """Lazy sequence of text fragments from one streamed provider call.

    Iteration yields fragments in provider order and ends when the provider
    signals completion. ``close()`` releases the underlying connection and may
    be called from another thread to stop consumption early; a closed stream
    yields nothing more.
    """

    def __init__(self, fragments: Iterable[str], on_close: Optional[Callable[[], None]] = None):
        self._iterator: Iterator[str] = iter(fragments)
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> "FragmentStream":
        return self

    def __next__(self) -> str:
        if self._closed:
            raise StopIteration
        try:
            return next(self._iterator)
        except StopIteration:
            self.close()
            raise
        except Exception:
            if self._closed:
                # connection torn down by close() while reading
                raise StopIteration
            self.close()
            raise

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close()

    def __enter__(self) -> "FragmentStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class LLMProvider(ABC):
    """Abstract base class for LLM providers"""

    def __init__(self, config: Dict[str, Any]):
        """Initialize provider with configuration

        Args:
            config: Provider connection options (api_url, timeout, ...)

        Raises:
            ValueError: If configuration is invalid
        """
        self.config = config
        self._validate_config(config)
        self.llm_config = LLMConfig()

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate provider configuration

        Args:
            config: Configuration dictionary

        Raises:
            ValueError: If configuration is invalid
        """
        # Override in subclasses for specific validation
        pass

    def reconfigure(self, llm_config: LLMConfig) -> None:
        """Replace the cached model/sampling settings used by later calls"""
        self.llm_config = llm_config

    def _effective(self, llm_config: Optional[LLMConfig]) -> LLMConfig:
        return llm_config if llm_config is not None else self.llm_config

    @abstractmethod
    def generate(self, messages: List[Message], llm_config: Optional[LLMConfig] = None) -> str:
        """Run a one-shot completion

        Args:
            messages: Ordered chat messages (system first)
            llm_config: Settings for this call only (None = cached settings)

        Returns:
            Final response text

        Raises:
            ProviderError: If the provider rejects the call
        """
        pass

    @abstractmethod
    def stream(self, messages: List[Message], llm_config: Optional[LLMConfig] = None) -> FragmentStream:
        """Start a streamed completion

        The request is sent before this returns, so provider errors surface
        here rather than mid-stream.

        Raises:
            ProviderError: If the provider rejects the call
        """
        pass
