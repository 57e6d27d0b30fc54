import pytest

pytestmark = pytest.mark.integration

from webdiary.domains.diary.models import SearchToken
from webdiary.extensions import db


def test_reindex_command(app, user, other_user, make_entry):
    make_entry(user, title="alpha")
    make_entry(other_user, title="beta")
    SearchToken.query.delete()
    db.session.commit()

    runner = app.test_cli_runner()
    result = runner.invoke(args=["reindex", "--user-id", str(user.id)])

    assert result.exit_code == 0, result.output
    assert "Reindexed 1 entries" in result.output
    assert {t.token for t in SearchToken.query.all()} == {"alpha"}
