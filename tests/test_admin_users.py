import pytest

from app.core.config import settings

from conftest import auth


def new_user(user_type="farmer", email="new@example.com"):
    return {"email": email, "password": "secret", "fullName": "New Person", "userType": user_type}


def test_listing_users_requires_admin(client, buyer, admin):
    assert client.get("/admin/users").status_code == 401
    assert client.get("/admin/users", headers=auth(buyer)).status_code == 403
    response = client.get("/admin/users", headers=auth(admin))
    assert response.status_code == 200
    assert {u["id"] for u in response.json()} == {buyer.id, admin.id}


def test_admin_creates_farmer(client, admin):
    response = client.post("/admin/users", json=new_user("farmer"), headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["role"] == "farmer"
    # The new account can log in
    login = client.post("/auth/login", json={"email": "new@example.com", "password": "secret"})
    assert login.status_code == 200


def test_admin_cannot_create_admin(client, admin):
    response = client.post("/admin/users", json=new_user("admin"), headers=auth(admin))
    assert response.status_code == 403


def test_super_admin_creates_admin(client, super_admin):
    response = client.post("/admin/users", json=new_user("admin"), headers=auth(super_admin))
    assert response.status_code == 200
    assert response.json()["role"] == "admin"


@pytest.mark.parametrize("role", ["super_admin", "owner", ""])
def test_unassignable_roles(client, super_admin, role):
    response = client.post("/admin/users", json=new_user(role), headers=auth(super_admin))
    assert response.status_code == 400


def test_duplicate_email(client, admin, buyer):
    response = client.post("/admin/users", json=new_user(email=buyer.email), headers=auth(admin))
    assert response.status_code == 400


def test_super_admin_account_is_untouchable(client, admin, super_admin, make_user):
    other_super = make_user("super_admin")
    for caller in (admin, super_admin):
        for target in (super_admin, other_super):
            assert client.put(f"/admin/users/{target.id}", json={"fullName": "X"}, headers=auth(caller)).status_code == 403
            assert client.delete(f"/admin/users/{target.id}", headers=auth(caller)).status_code == 403
    assert client.get(f"/users/{super_admin.id}").json()["full_name"] == "Sam Super"


def test_admin_cannot_modify_other_admins(client, admin, make_user):
    other_admin = make_user("admin")
    assert client.put(f"/admin/users/{other_admin.id}", json={"fullName": "X"}, headers=auth(admin)).status_code == 403
    assert client.delete(f"/admin/users/{other_admin.id}", headers=auth(admin)).status_code == 403


def test_admin_cannot_promote_to_admin(client, admin, buyer):
    response = client.put(f"/admin/users/{buyer.id}", json={"userType": "admin"}, headers=auth(admin))
    assert response.status_code == 403
    assert client.get(f"/users/{buyer.id}").json()["role"] == "buyer"


def test_super_admin_promotes_and_edits(client, super_admin, buyer):
    response = client.put(
        f"/admin/users/{buyer.id}",
        json={"userType": "admin", "fullName": "Promoted", "email": "promoted@example.com"},
        headers=auth(super_admin),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "admin"
    assert body["full_name"] == "Promoted"
    assert body["email"] == "promoted@example.com"


def test_update_cannot_assign_super_admin(client, super_admin, buyer):
    response = client.put(f"/admin/users/{buyer.id}", json={"userType": "super_admin"}, headers=auth(super_admin))
    assert response.status_code == 400


def test_admin_edits_buyer_password(client, admin, buyer):
    response = client.put(f"/admin/users/{buyer.id}", json={"password": "changed"}, headers=auth(admin))
    assert response.status_code == 200
    login = client.post("/auth/login", json={"email": buyer.email, "password": "changed"})
    assert login.status_code == 200


def test_update_unknown_user(client, admin):
    assert client.put("/admin/users/999", json={"fullName": "X"}, headers=auth(admin)).status_code == 404


def test_admin_deletes_buyer(client, admin, buyer):
    response = client.delete(f"/admin/users/{buyer.id}", headers=auth(admin))
    assert response.status_code == 200
    assert client.get(f"/users/{buyer.id}").status_code == 404


def test_deleting_farmer_removes_crop_images(client, admin, farmer, create_crop):
    png = ("maize.png", b"\x89PNG\r\n\x1a\nfake", "image/png")
    crops = [create_crop(farmer, name=name, files={"image": png}) for name in ("Maize", "Beans")]
    paths = [settings.crop_upload_dir / crop["image_url"].rsplit("/", 1)[-1] for crop in crops]
    assert all(path.exists() for path in paths)

    assert client.delete(f"/admin/users/{farmer.id}", headers=auth(admin)).status_code == 200

    assert not any(path.exists() for path in paths)
    assert client.get("/crops", params={"farmerId": farmer.id}).json()["total"] == 0


def test_super_admin_deletes_admin(client, super_admin, admin):
    assert client.delete(f"/admin/users/{admin.id}", headers=auth(super_admin)).status_code == 200


def test_public_admin_list(client, admin, super_admin, buyer):
    response = client.get("/admins")
    assert response.status_code == 200
    assert {u["id"] for u in response.json()} == {admin.id, super_admin.id}
