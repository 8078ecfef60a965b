import pytest

from lead_reconciler.models import RawFile
from lead_reconciler.storage.memory import InMemoryBlobStore, InMemoryRecordStore

MAIN_CSV = (
    "first_name,last_name,phone,email\n"
    "Ada,Lovelace,5551234567,ada@example.com\n"
    "Bob,Byron,555-123-4568,bob@example.com\n"
    "Cy,Babbage,(555)123-4569,cy@example.com\n"
    "Dee,Somerville,1234567,dee@example.com\n"
    "Eve,Herschel,5551234570,eve@example.com\n"
)

DIALABLES_TXT = (
    "entry_date\tlist_id\tvendor_lead_code\tsource_id\tphone_numbers\n"
    "2025-10-17 08:15:00\t9321\t16\t468ed406a837e21.06053311\t5551234567\n"
    "2025-10-17 08:16:00\t9321\t16\t468ed406a837e21.06053311\t5551234568\n"
)


@pytest.fixture()
def main_text() -> str:
    return MAIN_CSV


@pytest.fixture()
def dialables_text() -> str:
    return DIALABLES_TXT


@pytest.fixture()
def lead_files():
    return [
        RawFile("leads.csv", MAIN_CSV.encode("utf-8")),
        RawFile("LIST_9321.txt", DIALABLES_TXT.encode("utf-8")),
    ]


@pytest.fixture()
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture()
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()
