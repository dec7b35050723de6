"""
书籍管理端到端测试
测试完整的书籍管理工作流程
"""
import pytest


@pytest.mark.e2e
class TestBookManagementFlow:
    """书籍管理端到端测试类"""

    def test_complete_book_lifecycle(self, client, sample_book_data):
        """测试完整的书籍生命周期"""
        # 1. 创建书籍
        create_response = client.post("/api/books", json=sample_book_data)
        assert create_response.status_code == 201
        book = create_response.json()
        book_id = book["id"]
        assert book["isbn"] == "978-0-441-01359-3"

        # 2. 验证书籍可以获取
        get_response = client.get(f"/api/books/{book_id}")
        assert get_response.status_code == 200
        assert get_response.json()["title"] == sample_book_data["title"]

        # 3. 出现在列表中
        list_data = client.get("/api/books").json()
        assert list_data["total_books"] == 1
        assert list_data["books"][0]["id"] == book_id

        # 4. 可以被搜索到
        search_data = client.get("/api/books/search", params={"q": "Herbert"}).json()
        assert [b["id"] for b in search_data["books"]] == [book_id]

        # 5. 更新书籍
        update_data = dict(sample_book_data, title="Dune Messiah", published="1969-10-15")
        update_response = client.put(f"/api/books/{book_id}", json=update_data)
        assert update_response.status_code == 200
        updated = update_response.json()
        assert updated["title"] == "Dune Messiah"
        assert updated["created_at"] == book["created_at"]
        assert updated["published"].startswith("1969-10-15")

        # 6. 删除书籍
        delete_response = client.delete(f"/api/books/{book_id}")
        assert delete_response.status_code == 204

        # 7. 删除后获取返回404，再次删除也返回404
        assert client.get(f"/api/books/{book_id}").status_code == 404
        assert client.delete(f"/api/books/{book_id}").status_code == 404

        list_data = client.get("/api/books").json()
        assert list_data["total_books"] == 0

    def test_isbn_freed_after_delete(self, client, sample_book_data):
        """测试删除后ISBN可以重新使用，且ID不会复用"""
        first = client.post("/api/books", json=sample_book_data).json()
        client.delete(f"/api/books/{first['id']}")

        second_response = client.post("/api/books", json=sample_book_data)
        assert second_response.status_code == 201
        assert second_response.json()["id"] > first["id"]

    def test_persistence_across_app_instances(self, temp_db_path, sample_book_data):
        """测试数据保存在数据库文件中"""
        from fastapi.testclient import TestClient
        from bookshelf.config import Config
        from bookshelf.main import create_app

        with TestClient(create_app(Config(db_path=temp_db_path))) as first_client:
            created = first_client.post("/api/books", json=sample_book_data).json()

        with TestClient(create_app(Config(db_path=temp_db_path))) as second_client:
            response = second_client.get(f"/api/books/{created['id']}")
            assert response.status_code == 200
            assert response.json()["isbn"] == created["isbn"]
