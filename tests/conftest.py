import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.address_normalizer import AddressNormalizer, load_country_continents
from core.location_types import LocationRecord
from db.db import build_engine, init_db
from db.term_store import SqlTermStore


@pytest.fixture(name="engine")
def engine_fixture():
    # In-memory SQLite shared across the test's connections
    engine = build_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    Session = sessionmaker(bind=engine)
    with Session() as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(session):
    return SqlTermStore(session)


@pytest.fixture(name="normalizer")
def normalizer_fixture():
    return AddressNormalizer(load_country_continents())


@pytest.fixture(name="munich_result")
def munich_result_fixture():
    return {
        "lat": "48.1371079",
        "lon": "11.5753822",
        "display_name": "1, Marienplatz, Altstadt, München, Bayern, 80331, Deutschland",
        "address": {
            "house_number": "1",
            "road": "Marienplatz",
            "city": "Munich",
            "state": "Bavaria",
            "postcode": "80331",
            "country": "Germany",
            "country_code": "de",
        },
    }


@pytest.fixture(name="berlin_result")
def berlin_result_fixture():
    return {
        "address": {
            "house_number": "81-84",
            "road": "Greifswalder Straße",
            "suburb": "Prenzlauer Berg",
            "borough": "Pankow",
            "city": "Berlin",
            "country": "Germany",
            "country_code": "de",
        },
    }


@pytest.fixture(name="munich_record")
def munich_record_fixture():
    return LocationRecord(
        continent="Europe",
        country="Germany",
        country_code="de",
        state="Bavaria",
        city="Munich",
        street="Marienplatz",
        street_number="1",
    )
