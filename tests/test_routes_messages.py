# =============================================================================
# tests/test_routes_messages.py - Message and Contact Route Tests
# =============================================================================


class TestDeleteMessages:
    """Tests for DELETE /api/messages."""

    def test_by_ids(self, user_client, tenant_db):
        response = user_client.delete("/api/messages", params={"ids": "m1, m2,,m3"})

        assert response.status_code == 200
        assert response.json()["message"] == "Successfully deleted 3 messages"
        assert tenant_db.queries("messages", "delete")[0].filter_value("in", "id") == ["m1", "m2", "m3"]
        assert tenant_db.queries("memories", "delete")[0].filter_value("in", "message_id") == ["m1", "m2", "m3"]

    def test_by_contact(self, user_client, tenant_db):
        tenant_db.queue("messages", "select", [{"id": "m1"}])

        response = user_client.delete("/api/messages", params={"contactId": "contact-1"})

        assert response.json() == {"success": True, "message": "Successfully deleted 1 messages"}
        assert tenant_db.queries("messages", "select")[0].filter_value("eq", "contact_id") == "contact-1"

    def test_nothing_given(self, user_client):
        response = user_client.delete("/api/messages")

        assert response.status_code == 400
        assert response.json()["error"] == "No message IDs or contact ID provided"

    def test_delete_failure(self, user_client, tenant_db):
        tenant_db.queue("messages", "delete", RuntimeError("permission denied"))

        response = user_client.delete("/api/messages", params={"ids": "m1"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to delete messages"


class TestMarkViewed:
    def test_marks_messages(self, user_client, tenant_db):
        tenant_db.queue("messages", "update", [{"id": "m1"}])

        response = user_client.post(
            "/api/messages/mark-viewed",
            json={"messageIds": ["m1"], "contactId": "contact-1"},
        )

        assert response.status_code == 200
        assert response.json()["updatedCount"] == 1
        assert tenant_db.queries("messages", "update")[0].payload == {"is_viewed": True}

    def test_empty_list(self, user_client):
        response = user_client.post("/api/messages/mark-viewed", json={"messageIds": []})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid input: messageIds array is required"

    def test_not_a_list(self, user_client):
        response = user_client.post("/api/messages/mark-viewed", json={"messageIds": "m1"})

        assert response.status_code == 400


class TestUnseenAndStats:
    def test_unseen(self, user_client, tenant_db):
        tenant_db.queue("messages", "select", [
            {"id": "m2", "content": "Hello?", "contact_id": "c1", "contacts": {"id": "c1", "name": "Ada"}},
        ])

        data = user_client.get("/api/messages/unseen").json()

        assert data["success"] is True
        assert data["count"] == 1
        assert data["messages"][0]["contacts"]["name"] == "Ada"

    def test_stats(self, user_client, tenant_db):
        tenant_db.queue("messages", "select", [{"id": "r1", "contact_id": "c1"}], [])

        stats = user_client.get("/api/messages/stats").json()["stats"]

        assert stats["repliesSent"] == 1
        assert stats["unreadCount"] == 0
        assert stats["uniqueCustomersCount"] == 1

    def test_stats_failure(self, user_client, tenant_db):
        tenant_db.queue("messages", "select", RuntimeError("timeout"))

        response = user_client.get("/api/messages/stats")

        assert response.status_code == 500
        assert response.json()["error"] == "Database error: timeout"

    def test_view_status(self, user_client, tenant_db):
        tenant_db.queue("messages", "select", [{"id": "m1"}, {"id": "m2"}])

        data = user_client.get("/api/messages/view-status", params={"contactId": "c1"}).json()

        assert data["hasUnviewedMessages"] is True
        assert data["unviewedCount"] == 2
        assert tenant_db.queries("messages", "select")[0].filter_value("eq", "contact_id") == "c1"

    def test_view_status_requires_contact(self, user_client):
        response = user_client.get("/api/messages/view-status")

        assert response.status_code == 400
        assert response.json()["error"] == "Contact ID is required"

    def test_view_status_failure(self, user_client, tenant_db):
        tenant_db.queue("messages", "select", RuntimeError("timeout"))

        response = user_client.get("/api/messages/view-status", params={"contactId": "c1"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to check message view status"

    def test_partial_credentials_use_admin_project(self, client, admin_db):
        client.cookies.set("supabase_url", "https://user-project.supabase.co")

        assert client.get("/api/messages/unseen").status_code == 200
        assert admin_db.queries("messages", "select")


class TestContacts:
    def test_recent_contacts(self, user_client, tenant_db):
        tenant_db.queue("contacts", "select", [{"id": "c1", "name": "Ada", "contact_info": "777"}])

        response = user_client.get("/api/contacts/list")

        assert response.status_code == 200
        assert response.json() == {"contacts": [{"id": "c1", "name": "Ada", "contact_info": "777"}]}
        query = tenant_db.queries("contacts", "select")[0]
        assert ("order", "created_at", True) in query.modifiers
        assert ("limit", 10) in query.modifiers

    def test_failure(self, user_client, tenant_db):
        tenant_db.queue("contacts", "select", RuntimeError("relation contacts does not exist"))

        response = user_client.get("/api/contacts/list")

        assert response.status_code == 500
        assert response.json()["error"] == "Database error fetching contacts"
