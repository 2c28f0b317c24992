import io
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import jwt
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


@pytest.fixture(autouse=True, scope="session")
def set_test_env_vars():
    # Database settings
    os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

    # JWT Authentication settings
    os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key")
    os.environ.setdefault("JWT_ALGORITHM", "HS256")

    # Storage settings
    os.environ.setdefault("AWS_S3_BUCKET_NAME", "test-bucket")
    os.environ.setdefault("AWS_REGION", "us-east-1")

    # Keep the limiter out of the way of ordinary tests
    os.environ.setdefault("RATE_LIMIT", "1000/minute")


@pytest.fixture
def db_engine():
    from medflow.db.init_db import init_db

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_profile(db_session):
    """Insert a profile row and return it."""
    from medflow.models import ORMProfile

    def _make(profile_id: str, role: str = "client") -> ORMProfile:
        profile = ORMProfile(id=profile_id, email=f"{profile_id}@example.com", role=role)
        db_session.add(profile)
        db_session.commit()
        return profile

    return _make


@pytest.fixture
def make_user_file(db_session):
    """Insert a user_files row (one upload event) and return it."""
    from medflow.models import ORMUserFile

    def _make(s3_key: str, user_id: str, file_name: str, uploaded_at=None) -> ORMUserFile:
        row = ORMUserFile(
            s3_key=s3_key,
            user_id=user_id,
            file_name=file_name,
            uploaded_at=uploaded_at,
        )
        db_session.add(row)
        db_session.commit()
        return row

    return _make


@pytest.fixture
def make_token():
    """Sign a dashboard-style auth token for a profile id."""
    from medflow.config import get_settings

    def _make(user_id: str, expires_delta: timedelta = timedelta(days=7)) -> str:
        settings = get_settings()
        payload = {
            "id": user_id,
            "exp": datetime.now(timezone.utc) + expires_delta,
        }
        return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    return _make


@pytest.fixture
def mock_s3_storage():
    """S3ObjectStorage whose boto3 client is a MagicMock."""
    from medflow.s3_object_storage import S3Config, S3ObjectStorage

    storage = S3ObjectStorage(S3Config(bucket_name="test-bucket"))
    client = MagicMock()
    client.head_object.return_value = {}
    client.generate_presigned_url.return_value = "https://signed.example/object"
    client.get_object.return_value = {
        "Body": io.BytesIO(b"DICM-data"),
        "ContentType": "application/dicom",
        "ContentLength": 9,
    }
    storage._client = client
    return storage


@pytest.fixture
def client(db_session, mock_s3_storage):
    """TestClient wired to the in-memory database and mocked S3."""
    from fastapi.testclient import TestClient

    from medflow.db.database import get_db
    from medflow.dependencies import get_s3_object_storage
    from medflow.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_s3_object_storage] = lambda: mock_s3_storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
