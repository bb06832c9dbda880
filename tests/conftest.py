import pytest

from hunt.storage.sqlite import JobDatabase


@pytest.fixture
def db(tmp_path):
    database = JobDatabase(str(tmp_path / "jobs.db"))
    yield database
    database.close()
