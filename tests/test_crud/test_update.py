"""
Tests for CRUD.update.

Tests cover:
- Updating an instance
- Updating by ID and by key/value lookup
- Lookup errors passing through
- Validation and integrity errors
- Instances loaded by another session
"""

from sqlalchemy.orm import Session, sessionmaker

from crud import CRUD
from tests.models import User, Post


class TestUpdateInstance:
    """Tests for update(instance, attrs)."""

    def test_update_instance(self, crud: CRUD, users, db_session: Session):
        """Test updating a loaded instance."""
        result = crud.update(users[0], {"age": 31})

        assert result.is_ok
        assert result.value.age == 31
        db_session.expire_all()
        assert db_session.get(User, users[0].id).age == 31

    def test_update_instance_keywords(self, crud: CRUD, users):
        """Test attributes given as keyword arguments."""
        status, user = crud.update(users[1], name="Robert Stone", age=50)

        assert status == "ok"
        assert user.name == "Robert Stone"
        assert user.age == 50

    def test_partial_update_keeps_other_fields(self, crud: CRUD, users):
        """Test only the given fields change."""
        result = crud.update(users[2], [("active", True)])

        assert result.is_ok
        assert result.value.active is True
        assert result.value.name == "Carla Mendez"
        assert result.value.age == 41

    def test_schema_error(self, crud: CRUD, users):
        """Test an invalid value is reported."""
        result = crud.update(users[0], {"name": "A"})

        assert result.is_error
        assert result.value == ["Name: String should have at least 2 characters"]

    def test_validates_hook_error_restores_value(self, crud: CRUD, post: Post):
        """Test a rejected @validates value leaves the record untouched."""
        result = crud.update(post, {"body": "Edited", "title": ""})

        assert result.is_error
        assert result.value == ["Title: can't be blank"]
        assert post.title == "Hello world"
        assert post.body == "First post"

    def test_duplicate_value(self, crud: CRUD, users):
        """Test a unique constraint violation."""
        result = crud.update(users[1], {"email": "ana@example.com"})

        assert result.is_error
        assert "UNIQUE" in result.value[0]


class TestUpdateByLookup:
    """Tests for update(model, id, attrs) and update(model, key, value, attrs)."""

    def test_update_by_id(self, crud: CRUD, users):
        """Test updating by primary key."""
        result = crud.update(User, users[0].id, {"active": False})

        assert result.is_ok
        assert result.value.id == users[0].id
        assert result.value.active is False

    def test_update_by_id_keywords(self, crud: CRUD, users):
        """Test updating by primary key with keyword attributes."""
        result = crud.update(User, users[0].id, age=33)

        assert result.value.age == 33

    def test_update_by_id_not_found(self, crud: CRUD, users):
        """Test the lookup error passes through."""
        result = crud.update(User, 9999, {"age": 1})

        assert result.is_error
        assert result.value == "User not found"

    def test_update_by_key_value(self, crud: CRUD, users):
        """Test updating the record matched by one field."""
        result = crud.update(User, "email", "bob@example.org", {"age": 27})

        assert result.is_ok
        assert result.value.id == users[1].id
        assert result.value.age == 27

    def test_update_by_key_value_keywords(self, crud: CRUD, users):
        """Test key/value lookup with keyword attributes."""
        result = crud.update(User, "email", "carla@example.com", name="Carla M.")

        assert result.value.name == "Carla M."

    def test_update_by_key_value_not_found(self, crud: CRUD, users):
        """Test a missing key/value match."""
        result = crud.update(User, "email", "zed@example.com", {"age": 1})

        assert result.value == "User not found"

    def test_update_by_ambiguous_key_value(self, crud: CRUD, users):
        """Test a lookup matching several rows."""
        result = crud.update(User, "active", True, {"age": 1})

        assert result.is_error
        assert result.value == ["Expected at most one User, got several"]


class TestUpdateAcrossSessions:
    """Tests for instances loaded by a different session."""

    def test_update_detached_instance(self, db_engine, users):
        """Test an instance from a closed session is attached and updated."""
        first = sessionmaker(bind=db_engine)()
        user = first.get(User, users[0].id)
        first.commit()
        first.close()

        second = sessionmaker(bind=db_engine)()
        try:
            result = CRUD(second, autocommit=True).update(user, {"age": 77})

            assert result.is_ok
            assert result.value.age == 77
            assert second.query(User.age).filter(User.id == users[0].id).scalar() == 77
        finally:
            second.close()

    def test_update_detached_instance_row_gone(self, db_engine, users, db_session: Session):
        """Test a detached instance whose row was deleted is not found."""
        first = sessionmaker(bind=db_engine)()
        user = first.get(User, users[1].id)
        first.commit()
        first.close()
        db_session.delete(users[1])
        db_session.commit()

        second = sessionmaker(bind=db_engine)()
        try:
            result = CRUD(second, autocommit=True).update(user, {"age": 77})
        finally:
            second.close()

        assert result.is_error
        assert result.value == "User not found"

    def test_update_instance_owned_by_live_session(self, db_engine, users):
        """Test an instance attached elsewhere gives readable errors."""
        other = sessionmaker(bind=db_engine)()
        try:
            result = CRUD(other, autocommit=True).update(users[0], {"age": 77})
        finally:
            other.close()

        assert result.is_error
        assert isinstance(result.value, list)
        assert all(isinstance(message, str) for message in result.value)
        assert "already attached" in result.value[0]
