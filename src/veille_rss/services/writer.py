"""Atomic JSON key-value file for persistent state."""

import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict


logger = logging.getLogger(__name__)


class StateWriter:
    """Atomic key-value writer backed by a single JSON document."""

    def __init__(self, state_file: Path) -> None:
        """
        Initialize the state writer.

        Args:
            state_file: Path of the JSON document
        """
        self.state_file = Path(state_file)

    def read_state(self) -> Dict[str, Any]:
        """
        Read the current state from the state file.

        Returns:
            Dictionary containing the current state
        """
        if not self.state_file.exists():
            return {}

        try:
            with open(self.state_file, 'r', encoding='utf-8') as f:
                state = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            # Corrupt or unreadable files read as empty
            logger.warning(f"Ignoring unreadable state file {self.state_file}: {e}")
            return {}

        if not isinstance(state, dict):
            logger.warning(f"Ignoring state file {self.state_file}: not a JSON object")
            return {}

        return state

    def get_key(self, key: str, default: Any = None) -> Any:
        """
        Get a value from the state file.

        Args:
            key: The key to retrieve
            default: Default value if key doesn't exist

        Returns:
            The value associated with the key, or default if not found
        """
        return self.read_state().get(key, default)

    def write_key(self, key: str, value: Any) -> None:
        """
        Atomically write a key-value pair to the state file.

        Args:
            key: The key to write
            value: The value to write (must be JSON serializable)

        Raises:
            IOError: If writing fails
        """
        current_state = self.read_state()
        current_state[key] = value
        self._write_state_atomic(current_state)

    def _write_state_atomic(self, state: Dict[str, Any]) -> None:
        """
        Atomically write state to file using temporary file.

        Args:
            state: The state dictionary to write

        Raises:
            IOError: If writing fails
        """
        self.state_file.parent.mkdir(parents=True, exist_ok=True)

        temp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                mode='w',
                encoding='utf-8',
                dir=self.state_file.parent,
                delete=False,
                suffix='.tmp'
            ) as temp_file:
                temp_path = Path(temp_file.name)
                json.dump(state, temp_file, indent=2, ensure_ascii=False)
                temp_file.flush()

            # Atomic move to final location
            temp_path.replace(self.state_file)

        except (OSError, TypeError, ValueError) as e:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise IOError(f"Failed to write state file: {e}") from e
