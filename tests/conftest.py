import pytest

from studio_edits.history import HistoryManager


@pytest.fixture
def sample_snapshot():
    return {
        "/main.js": "const speed = 1;\nconst size = 10;\n\nfunction draw() {\n  circle(0, 0, size);\n}\n",
        "/index.html": "<html>\n<body>\n<script src=\"main.js\"></script>\n</body>\n</html>\n",
        "/a.js": "let x = 1;",
    }


@pytest.fixture
def manager():
    return HistoryManager()
