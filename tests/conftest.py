import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, create_engine, SQLModel
from sqlmodel.pool import StaticPool
from core.config import Settings, get_settings
from core.deps import get_db
from api.abstracts.models import Abstract
from main import app


class UploadsTree:
    """Builds a <public>/uploads/abstracts tree for a test"""

    def __init__(self, public_dir):
        self.public_dir = public_dir
        self.root = public_dir / "uploads" / "abstracts"

    def add(self, folder: str, filename: str, content: bytes = b"content"):
        """Create <folder>/<filename> under the abstract uploads dir"""
        path = self.root / folder / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    def mkdir(self, folder: str):
        path = self.root / folder
        path.mkdir(parents=True, exist_ok=True)
        return path


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="public_dir")
def public_dir_fixture(tmp_path):
    public_dir = tmp_path / "public"
    public_dir.mkdir()
    return public_dir


@pytest.fixture(name="test_settings")
def test_settings_fixture(public_dir):
    """Settings pointing at a temporary public dir"""
    return Settings(
        PUBLIC_DIR=public_dir,
        ENVIRONMENT="development",
        ABSTRACT_EXTENSION_FALLBACK=True,
        ABSTRACT_LIST_AVAILABLE_FILES=True,
    )


@pytest.fixture(name="uploads")
def uploads_fixture(public_dir):
    return UploadsTree(public_dir)


@pytest.fixture(name="add_abstract")
def add_abstract_fixture(session: Session):
    """Insert an abstract row and return it"""
    def _add_abstract(**fields) -> Abstract:
        fields.setdefault("title", "Biomarkers in early sepsis")
        fields.setdefault("presenter_name", "Dana Okafor")
        fields.setdefault("status", "submitted")
        abstract = Abstract(**fields)
        session.add(abstract)
        session.commit()
        session.refresh(abstract)
        return abstract
    return _add_abstract


@pytest.fixture(name="client")
def client_fixture(session: Session, test_settings: Settings):
    def get_db_override():
        return session

    def get_settings_override():
        return test_settings

    app.dependency_overrides[get_db] = get_db_override
    app.dependency_overrides[get_settings] = get_settings_override

    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
