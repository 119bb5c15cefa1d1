"""Service-level tests for the image replace protocol and ownership rules."""

import base64

import pytest

from app.core.exceptions import AuthError, ForbiddenError, NotFoundError, ValidationError
from app.core.storage import LocalStorage
from app.modules.auth.context import AuthContext
from app.modules.auth.services.auth import register_user
from app.modules.posts.models.post import Post
from app.modules.posts.schemas.post import FileInput, PostInput
from app.modules.posts.services import post as post_service
from app.modules.user_management.schemas.user import UserCreate


class RecordingStorage(LocalStorage):
    """Records the order of storage calls and what the database held at each delete."""

    def __init__(self, db, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.db = db
        self.calls = []

    def upload(self, content, content_type, filename):
        url = super().upload(content, content_type, filename)
        self.calls.append(("upload", url))
        return url

    def delete(self, url):
        referenced = {row.image_url for row in self.db.query(Post).all()}
        self.calls.append(("delete", url, url in referenced))
        return super().delete(url)


def image(name):
    return FileInput(filename=name, mimetype="image/jpeg", base64=base64.b64encode(name.encode()).decode())


@pytest.fixture
def storage(db, tmp_path):
    return RecordingStorage(db, directory=str(tmp_path), base_url="http://testserver/static")


@pytest.fixture
def owner(db):
    user = register_user(db, UserCreate(email="owner@x.com", name="Owner", password="secret"))
    return AuthContext.for_user(user.id)


@pytest.fixture
def stranger(db):
    user = register_user(db, UserCreate(email="stranger@x.com", name="Stranger", password="secret"))
    return AuthContext.for_user(user.id)


def new_post(db, storage, auth, file=None):
    return post_service.create_post(
        db, storage, auth, PostInput(title="Hello World", content="Some content"), file
    )


def test_replace_uploads_and_links_before_deleting(db, storage, owner):
    post = new_post(db, storage, owner, image("old.jpg"))
    old_url = post.image_url
    storage.calls.clear()

    updated = post_service.update_post(db, storage, owner, post.id, PostInput(), image("new.jpg"))

    assert [call[0] for call in storage.calls] == ["upload", "delete"]
    assert storage.calls[0][1] == updated.image_url
    # By the time the old image is deleted, no post references it any more
    assert storage.calls[1] == ("delete", old_url, False)


def test_update_with_same_image_url_keeps_asset(db, storage, owner):
    post = new_post(db, storage, owner, image("keep.jpg"))
    storage.calls.clear()

    post_service.update_post(db, storage, owner, post.id, PostInput(image_url=post.image_url))
    assert storage.calls == []


def test_delete_removes_record_before_asset(db, storage, owner):
    post = new_post(db, storage, owner, image("gone.jpg"))
    url = post.image_url
    storage.calls.clear()

    assert post_service.delete_post(db, storage, owner, post.id) is True
    assert storage.calls == [("delete", url, False)]


def test_non_owner_is_forbidden_and_nothing_changes(db, storage, owner, stranger):
    post = new_post(db, storage, owner, image("mine.jpg"))
    storage.calls.clear()

    with pytest.raises(ForbiddenError):
        post_service.update_post(db, storage, stranger, post.id, PostInput(title="Stolen title"), image("x.jpg"))
    with pytest.raises(ForbiddenError):
        post_service.delete_post(db, storage, stranger, post.id)

    assert storage.calls == []
    db.expire_all()
    assert db.get(Post, post.id).title == "Hello World"


def test_validation_happens_before_upload(db, storage, owner):
    with pytest.raises(ValidationError) as excinfo:
        post_service.create_post(db, storage, owner, PostInput(title="Hi", content="Some content"), image("a.jpg"))
    assert excinfo.value.status_code == 422
    assert storage.calls == []
    assert db.query(Post).count() == 0


def test_anonymous_callers_are_rejected(db, storage, owner):
    post = new_post(db, storage, owner)
    anonymous = AuthContext.anonymous()
    with pytest.raises(AuthError):
        post_service.get_post(db, anonymous, post.id)
    with pytest.raises(AuthError):
        post_service.list_posts(db, anonymous)
    with pytest.raises(AuthError):
        new_post(db, storage, anonymous)


def test_get_missing_post(db, owner):
    with pytest.raises(NotFoundError):
        post_service.get_post(db, owner, "missing")


def test_list_posts_defaults_to_first_page(db, storage, owner):
    for _ in range(3):
        new_post(db, storage, owner)
    page = post_service.list_posts(db, owner, None)
    assert page.page == 1
    assert page.total_posts == 3
    assert page.last_page == 2
    assert len(page.posts) == 2


def test_page_far_past_the_end_skips_the_query(db, storage, owner):
    new_post(db, storage, owner)
    page = post_service.list_posts(db, owner, 2 ** 63)
    assert page.posts == []
    assert page.total_posts == 1
    assert page.last_page == 1
