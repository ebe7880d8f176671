import pytest

from models.incidents import Incident


def make_incident(id="1", incident_type="Fire", severity="Critical", timestamp="2024-01-01T10:00:00.000Z",
                  description="Warehouse fire", latitude=40.0, longitude=-73.0, reporter_name=None):
    return Incident(id=id, incident_type=incident_type, severity=severity, description=description,
                    latitude=latitude, longitude=longitude, reporter_name=reporter_name,
                    timestamp=timestamp)


@pytest.fixture
def fire():
    return make_incident(id="1", incident_type="Fire", severity="Critical", timestamp="2024-01-01T00:00:00.000Z")


@pytest.fixture
def flood():
    return make_incident(id="2", incident_type="Flood", severity="Low", timestamp="2024-06-01T00:00:00.000Z",
                         description="River overflow")


@pytest.fixture
def pair(fire, flood):
    return [fire, flood]


class FakeRepository:
    """記錄呼叫次數的假後端。"""

    def __init__(self, items=None, error=None, created=None):
        self.items = list(items or [])
        self.error = error
        self.created = created
        self.list_calls = []
        self.create_calls = []

    def list_incidents(self, filters=None):
        self.list_calls.append(filters)
        if self.error:
            raise self.error
        return list(self.items)

    def create_incident(self, draft):
        self.create_calls.append(draft)
        if self.error:
            raise self.error
        return self.created

    def health(self):
        return {"status": "OK"}
