"""Party repository."""

from credisphere.common import ResourceQueries


class PartyQueries(ResourceQueries):
    """Repository for parties (account holders and their references)."""

    RESOURCE = "Party"
    TABLE = "parties"
    COLUMNS = (
        "party_name",
        "account_number",
        "address",
        "mobile1",
        "mobile2",
        "reference",
        "reference_mobile1",
        "reference_mobile2",
    )

    CREATE_PARTIES_TABLE = """
        CREATE TABLE IF NOT EXISTS parties (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            party_name TEXT NOT NULL,
            account_number TEXT NOT NULL,
            address TEXT NOT NULL,
            mobile1 TEXT NOT NULL,
            mobile2 TEXT,
            reference TEXT,
            reference_mobile1 TEXT,
            reference_mobile2 TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    CREATE_STATEMENTS = (CREATE_PARTIES_TABLE,)

    SEARCH_COLUMNS = ("party_name", "account_number")
    SORT_COLUMNS = {
        "id": "id",
        "name": "party_name",
        "partyName": "party_name",
        "accountNumber": "account_number",
        "address": "address",
        "mobile1": "mobile1",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }
    DEFAULT_SORT = "party_name"
