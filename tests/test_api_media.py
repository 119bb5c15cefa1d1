"""Standalone image upload endpoint tests."""

PNG = b"\x89PNG\r\n\x1a\nfake-image-bytes"


def upload(client, headers=None, filename="photo.png", content_type="image/png", data=PNG, old_path=None):
    form = {"old_path": old_path} if old_path else None
    return client.put(
        "/api/v1/post-image",
        headers=headers,
        files={"image": (filename, data, content_type)},
        data=form,
    )


def test_upload_requires_auth(client, storage):
    response = upload(client)
    assert response.status_code == 401
    assert not any(storage.directory.rglob("*.png"))


def test_upload_stores_image(client, auth_headers, storage):
    response = upload(client, auth_headers)
    assert response.status_code == 201
    file_url = response.json()["file_url"]
    assert storage.path_for(storage.key_from_url(file_url)).read_bytes() == PNG


def test_other_content_types_are_silently_discarded(client, auth_headers, storage):
    response = upload(client, auth_headers, filename="notes.txt", content_type="text/plain", data=b"hello")
    assert response.status_code == 200
    assert response.json() == {"message": "No file provided!"}
    assert not any(storage.directory.rglob("*.txt"))


def test_missing_file(client, auth_headers):
    response = client.put("/api/v1/post-image", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "No file provided!"}


def test_upload_retires_previous_image(client, auth_headers, storage):
    first = upload(client, auth_headers, filename="first.png").json()["file_url"]
    second = upload(client, auth_headers, filename="second.png", old_path=first)
    assert second.status_code == 201

    assert not storage.path_for(storage.key_from_url(first)).exists()
    assert storage.path_for(storage.key_from_url(second.json()["file_url"])).exists()


def test_unknown_old_path_does_not_fail_upload(client, auth_headers):
    response = upload(client, auth_headers, old_path="https://elsewhere.example/x.png")
    assert response.status_code == 201


def test_cannot_retire_image_of_another_users_post(client, auth_headers, other_headers, storage):
    victim_url = upload(client, auth_headers, filename="mine.png").json()["file_url"]
    response = client.post(
        "/api/v1/posts",
        headers=auth_headers,
        json={"post_input": {"title": "Hello World", "content": "Some content", "image_url": victim_url}},
    )
    assert response.status_code == 201

    response = upload(client, other_headers, filename="theirs.png", old_path=victim_url)
    assert response.status_code == 201
    assert storage.path_for(storage.key_from_url(victim_url)).exists()


def test_linked_image_is_retired_by_the_post_update(client, auth_headers, storage):
    first = upload(client, auth_headers, filename="first.png").json()["file_url"]
    post = client.post(
        "/api/v1/posts",
        headers=auth_headers,
        json={"post_input": {"title": "Hello World", "content": "Some content", "image_url": first}},
    ).json()
    first_path = storage.path_for(storage.key_from_url(first))

    second = upload(client, auth_headers, filename="second.png", old_path=first).json()["file_url"]
    assert first_path.exists()

    response = client.put(
        f"/api/v1/posts/{post['id']}",
        headers=auth_headers,
        json={"post_input": {"image_url": second}},
    )
    assert response.status_code == 200
    assert response.json()["image_url"] == second
    assert not first_path.exists()
