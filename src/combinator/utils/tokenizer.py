# src/combinator/utils/tokenizer.py
import tiktoken

ENCODING_NAME = "cl100k_base"


class Tokenizer:
    _encoding = None
    # Set after a failed load so an offline run pays for at most one fetch attempt
    _unavailable = False

    @classmethod
    def get_encoding(cls):
        if cls._encoding is None:
            if cls._unavailable:
                raise RuntimeError(f"encoding {ENCODING_NAME} unavailable")
            try:
                cls._encoding = tiktoken.get_encoding(ENCODING_NAME)
            except Exception:
                cls._unavailable = True
                raise
        return cls._encoding

    @staticmethod
    def count(text: str) -> int:
        """Estimates token count for the combined output."""
        try:
            encoding = Tokenizer.get_encoding()
            return len(encoding.encode(text, disallowed_special=()))
        except Exception:
            # Encodings are fetched on first use; offline runs land here
            return len(text) // 4
