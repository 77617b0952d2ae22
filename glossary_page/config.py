from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List


@dataclass
class HostConfig:
    glossary_html_path: str = "./glossary.html"
    database_url: str = "sqlite+pysqlite:///./data/glossary_page.db"
    focus_poll_interval_ms: int = 50
    focus_timeout_ms: int = 2000
    element_wait_timeout_ms: int = 10000
    scroll_far_from_top_px: int = 1000
    scroll_event_budget: int = 5
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "HostConfig":
        origins = [o.strip() for o in os.getenv("GLOSSARY_CORS_ORIGINS", "*").split(",") if o.strip()]
        return cls(
            cors_origins=origins or ["*"],
            glossary_html_path=os.getenv("GLOSSARY_HTML_PATH", "./glossary.html"),
            database_url=os.getenv("GLOSSARY_DATABASE_URL", "sqlite+pysqlite:///./data/glossary_page.db"),
            focus_poll_interval_ms=int(os.getenv("GLOSSARY_FOCUS_POLL_INTERVAL_MS", "50")),
            focus_timeout_ms=int(os.getenv("GLOSSARY_FOCUS_TIMEOUT_MS", "2000")),
            element_wait_timeout_ms=int(os.getenv("GLOSSARY_ELEMENT_WAIT_TIMEOUT_MS", "10000")),
            scroll_far_from_top_px=int(os.getenv("GLOSSARY_SCROLL_FAR_FROM_TOP_PX", "1000")),
            scroll_event_budget=int(os.getenv("GLOSSARY_SCROLL_EVENT_BUDGET", "5")),
        )
