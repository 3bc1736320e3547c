"""
Tests for CRUD.delete.
"""

from sqlalchemy.orm import Session, sessionmaker

from crud import CRUD
from tests.models import User, Post


class TestDelete:
    """Tests for deleting records."""

    def test_delete_instance(self, crud: CRUD, post: Post, db_session: Session):
        """Test deleting a loaded instance."""
        post_id = post.id
        result = crud.delete(post)

        assert result.is_ok
        assert result.value is post
        assert db_session.get(Post, post_id) is None

    def test_delete_by_id(self, crud: CRUD, users, db_session: Session):
        """Test deleting by primary key."""
        carla_id = users[2].id
        status, deleted = crud.delete(User, carla_id)

        assert status == "ok"
        assert deleted.email == "carla@example.com"
        assert crud.exists(User, carla_id) is False
        assert db_session.query(User).count() == 2

    def test_delete_by_fields(self, crud: CRUD, users):
        """Test deleting the record matched by fields."""
        result = crud.delete(User, {"email": "bob@example.org"})

        assert result.is_ok
        assert crud.exists(User, {"email": "bob@example.org"}) is False

    def test_delete_by_id_not_found(self, crud: CRUD, users):
        """Test the lookup error passes through."""
        result = crud.delete(User, 9999)

        assert result.is_error
        assert result.value == "User not found"

    def test_delete_unsaved_instance(self, crud: CRUD):
        """Test an instance that was never saved."""
        result = crud.delete(User(name="Ghost", email="ghost@example.com"))

        assert result.is_error
        assert result.value == "User not found"

    def test_delete_twice(self, crud: CRUD, post: Post):
        """Test deleting an already deleted instance."""
        assert crud.delete(post).is_ok

        result = crud.delete(post)

        assert result.is_error
        assert result.value == "Post not found"

    def test_delete_row_removed_elsewhere(self, crud: CRUD, post: Post, db_session: Session):
        """Test an instance whose row no longer exists."""
        db_session.query(Post).filter(Post.id == post.id).delete(synchronize_session=False)
        db_session.commit()

        result = crud.delete(post)

        assert result.value == "Post not found"

    def test_delete_detached_instance(self, crud: CRUD, users, db_engine):
        """Test an instance from a closed session is deleted when its row exists."""
        first = sessionmaker(bind=db_engine)()
        user = first.get(User, users[1].id)
        first.close()

        second = sessionmaker(bind=db_engine)()
        try:
            result = CRUD(second, autocommit=True).delete(user)

            assert result.is_ok
            assert result.value is user
        finally:
            second.close()
        assert crud.exists(User, users[1].id) is False
