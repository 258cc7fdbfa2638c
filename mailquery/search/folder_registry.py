import re
from .models import DEFAULT_FOLDER

class FolderRegistry:
    """Registry mapping folder vocabulary to canonical Gmail mailbox names"""

    # Checked in order, first matching group wins
    FOLDERS = {
        "spam": {
            "folder": "[Gmail]/Spam",
            "patterns": [r"\bspam\b", r"\bjunk\b"]
        },
        "sent": {
            "folder": "[Gmail]/Sent Mail",
            "patterns": [
                r"\boutbox\b",
                r"\bsent\s+(?:mail|folder|items|box|messages|emails)\b",
                r"\b(?:emails?|messages?|mails?)\s+(?:that\s+)?i(?:'ve|\s+have)?\s+sent\b",
            ]
        },
        "drafts": {
            "folder": "[Gmail]/Drafts",
            "patterns": [r"\bdrafts?\b"]
        },
        "trash": {
            "folder": "[Gmail]/Trash",
            "patterns": [r"\btrash\b", r"\bdeleted\b", r"\b(?:recycle\s+)?bin\b"]
        },
        "important": {
            "folder": "[Gmail]/Important",
            "patterns": [r"\bimportant\b", r"\bpriority\b"]
        },
        "all": {
            "folder": "[Gmail]/All Mail",
            "patterns": [r"\ball\s+mail\b", r"\barchived?\b", r"\ball\s+folders\b"]
        },
        "starred": {
            "folder": "[Gmail]/Starred",
            "patterns": [r"\bstarred\b", r"\bflagged\b", r"\bstar\b"]
        },
    }

    # Common names accepted by the mailbox layer
    MAILBOX_NAMES = {
        "inbox": DEFAULT_FOLDER,
        "sent": "[Gmail]/Sent Mail",
        "drafts": "[Gmail]/Drafts",
        "trash": "[Gmail]/Trash",
        "spam": "[Gmail]/Spam",
        "starred": "[Gmail]/Starred",
        "important": "[Gmail]/Important",
        "all": "[Gmail]/All Mail",
    }

    _COMPILED = {
        group: [re.compile(pattern) for pattern in matchers["patterns"]]
        for group, matchers in FOLDERS.items()
    }

    @classmethod
    def classify(cls, text: str, default: str = DEFAULT_FOLDER) -> str:
        """
        Match folder vocabulary in a normalized query

        Args:
            text: Lowercased, trimmed query text
            default: Folder returned when no vocabulary group matches

        Returns:
            Canonical folder identifier
        """
        if not text:
            return default

        for group, patterns in cls._COMPILED.items():
            if any(pattern.search(text) for pattern in patterns):
                return cls.FOLDERS[group]["folder"]

        return default

    @classmethod
    def resolve_mailbox(cls, name: str) -> str:
        """Map a common folder name to its Gmail mailbox, passing unknown names through"""
        if not name:
            return DEFAULT_FOLDER
        return cls.MAILBOX_NAMES.get(name.strip().lower(), name)

    @classmethod
    def display_name(cls, folder: str) -> str:
        return folder.replace("[Gmail]/", "").strip()

    @classmethod
    def get_all_folders(cls) -> list[str]:
        """Return canonical folders in classification order"""
        return [matchers["folder"] for matchers in cls.FOLDERS.values()]
