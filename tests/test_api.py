import io
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient


def register_first(client: TestClient, full_name: str = "Amina Rahman", team_id: int = 1) -> str:
    response = client.post("/api/register/first", json={"full_name": full_name, "team_id": team_id})
    assert response.status_code == 200, response.text
    return response.json()["unique_code"]


class TestCatalogRoutes:

    def test_list_teams(self, client: TestClient):
        response = client.get("/api/teams")
        assert response.status_code == 200
        assert [t["code"] for t in response.json()] == ["QU", "BA", "NO", "FA"]

    def test_list_programs(self, client: TestClient):
        assert len(client.get("/api/programs").json()) == 14

        stage = client.get("/api/programs", params={"type": "stage"}).json()
        assert len(stage) == 8
        assert {p["type"] for p in stage} == {"stage"}

        non_stage_group = client.get(
            "/api/programs", params={"type": "non-stage", "participation_type": "group"}
        ).json()
        assert [p["name"] for p in non_stage_group] == ["Arabic Essay 09", "Arabic Calligraphy 10"]

    def test_participation_filter_needs_type(self, client: TestClient):
        response = client.get("/api/programs", params={"participation_type": "group"})
        assert len(response.json()) == 14

    def test_invalid_program_type(self, client: TestClient):
        assert client.get("/api/programs", params={"type": "backstage"}).status_code == 422


class TestRegistrationRoutes:

    def test_first_registration(self, client: TestClient):
        response = client.post("/api/register/first", json={"full_name": "Amina Rahman", "team_id": 2})
        assert response.status_code == 200
        body = response.json()
        assert body["unique_code"] == "BA001"
        assert body["participant"]["team"]["name"] == "BADR Team"
        assert "save your unique code" in body["message"]

    def test_duplicate_name(self, client: TestClient):
        register_first(client)
        response = client.post("/api/register/first", json={"full_name": "amina RAHMAN", "team_id": 1})
        assert response.status_code == 400
        assert "already exists" in response.json()["detail"]

    def test_invalid_team(self, client: TestClient):
        response = client.post("/api/register/first", json={"full_name": "Amina Rahman", "team_id": 42})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid team selected"

    def test_short_name_is_rejected(self, client: TestClient):
        response = client.post("/api/register/first", json={"full_name": "A", "team_id": 1})
        assert response.status_code == 422

    def test_lookup_by_code(self, client: TestClient):
        code = register_first(client)
        response = client.get(f"/api/participant/{code}")
        assert response.status_code == 200
        assert response.json()["participant"]["unique_code"] == code
        assert response.json()["registrations"] == []

    def test_lookup_unknown_code(self, client: TestClient):
        response = client.get("/api/participant/QU999")
        assert response.status_code == 404
        assert response.json() == {"detail": "Invalid code. Please check and try again."}

    def test_second_registration(self, client: TestClient):
        code = register_first(client)

        first = client.post("/api/register/second", json={"unique_code": code, "program_ids": [1, 2]})
        second = client.post(
            "/api/register/second",
            json={"unique_code": code, "program_ids": [2, 3], "profile_image": "artsfest_profiles/a.png"},
        )

        assert first.json()["new_registrations"] == 2
        body = second.json()
        assert body["new_registrations"] == 1
        assert sorted(r["program_id"] for r in body["registrations"]) == [1, 2, 3]
        assert body["registrations"][0]["participant"]["profile_image"] == "artsfest_profiles/a.png"

    def test_second_registration_unknown_code(self, client: TestClient):
        response = client.post("/api/register/second", json={"unique_code": "QU404", "program_ids": [1]})
        assert response.status_code == 404
        assert response.json()["detail"] == "Invalid code"

    @pytest.mark.parametrize(
        "payload",
        [
            {"unique_code": "QU001", "program_ids": []},
            {"unique_code": "QU1", "program_ids": [1]},
        ],
    )
    def test_second_registration_shape(self, client: TestClient, payload):
        register_first(client)
        assert client.post("/api/register/second", json=payload).status_code == 422

    def test_unknown_program(self, client: TestClient):
        code = register_first(client)
        response = client.post("/api/register/second", json={"unique_code": code, "program_ids": [77]})
        assert response.status_code == 400
        assert "77" in response.json()["detail"]

    def test_delete_registration(self, client: TestClient):
        code = register_first(client)
        registrations = client.post(
            "/api/register/second", json={"unique_code": code, "program_ids": [1, 2]}
        ).json()["registrations"]

        response = client.delete(f"/api/registration/{registrations[0]['id']}")
        assert response.status_code == 200
        assert response.json() == {"message": "Registration deleted successfully"}

        again = client.delete(f"/api/registration/{registrations[0]['id']}")
        assert again.status_code == 404

        remaining = client.get(f"/api/participant/{code}").json()["registrations"]
        assert [r["program_id"] for r in remaining] == [2]

    def test_all_registrations_and_stats(self, client: TestClient):
        amina = register_first(client, "Amina Rahman", 1)
        bilal = register_first(client, "Bilal Khan", 3)
        client.post("/api/register/second", json={"unique_code": amina, "program_ids": [1, 9]})
        client.post("/api/register/second", json={"unique_code": bilal, "program_ids": [2]})

        registrations = client.get("/api/registrations").json()
        assert len(registrations) == 3
        assert {r["participant"]["unique_code"] for r in registrations} == {amina, bilal}

        stats = client.get("/api/stats").json()
        assert stats == {
            "total_registered": 2,
            "stage_programs": 2,
            "non_stage_programs": 1,
            "total_programs": 3,
        }


class TestSqlBackedRoutes:

    def test_two_step_flow(self, sql_client: TestClient):
        code = register_first(sql_client, "Amina Rahman", 4)
        assert code == "FA001"

        response = sql_client.post("/api/register/second", json={"unique_code": code, "program_ids": [5, 11]})
        assert response.status_code == 200
        assert response.json()["new_registrations"] == 2

        lookup = sql_client.get(f"/api/participant/{code}").json()
        assert [r["program"]["name"] for r in lookup["registrations"]] == ["Arabic Speech 05", "Arabic Speech 11"]


class TestProfileUpload:

    def test_upload_image(self, client: TestClient):
        s3_client = MagicMock()
        s3_client.generate_presigned_url.return_value = "https://b2.example/signed"
        with patch("artsfest.common.storage.get_s3_client", return_value=s3_client):
            response = client.post(
                "/api/upload/profile",
                files={"image": ("amina.png", io.BytesIO(b"\x89PNG fake"), "image/png")},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["image_key"].startswith("artsfest_profiles/")
        assert body["image_key"].endswith(".png")
        assert body["image_url"] == "https://b2.example/signed"
        s3_client.put_object.assert_called_once()
        assert s3_client.put_object.call_args.kwargs["Key"] == body["image_key"]
        assert s3_client.generate_presigned_url.call_args.kwargs["Params"]["Key"] == body["image_key"]

    def test_rejects_non_images(self, client: TestClient):
        s3_client = MagicMock()
        with patch("artsfest.common.storage.get_s3_client", return_value=s3_client):
            response = client.post(
                "/api/upload/profile",
                files={"image": ("notes.txt", io.BytesIO(b"hello"), "text/plain")},
            )

        assert response.status_code == 400
        assert response.json()["detail"] == "Only image files are allowed"
        s3_client.put_object.assert_not_called()


class TestFileUrls:

    def test_resolves_profile_key(self, client: TestClient):
        s3_client = MagicMock()
        s3_client.generate_presigned_url.return_value = "https://b2.example/signed"
        with patch("artsfest.common.storage.get_s3_client", return_value=s3_client):
            response = client.get(
                "/api/files/url", params={"key": "artsfest_profiles/a.png", "expires_in": 600}
            )

        assert response.status_code == 200
        assert response.json() == {
            "url": "https://b2.example/signed",
            "key": "artsfest_profiles/a.png",
            "expires_in": 600,
        }
        s3_client.generate_presigned_url.assert_called_once_with(
            "get_object",
            Params={"Bucket": "artsfest-uploads", "Key": "artsfest_profiles/a.png"},
            ExpiresIn=600,
        )

    def test_rejects_keys_outside_uploads(self, client: TestClient):
        s3_client = MagicMock()
        with patch("artsfest.common.storage.get_s3_client", return_value=s3_client):
            response = client.get("/api/files/url", params={"key": "backups/db.sql"})

        assert response.status_code == 400
        s3_client.generate_presigned_url.assert_not_called()
