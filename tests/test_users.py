from auth import verify_token
from errors import Conflict, NotFound, Unauthorized, ValidationError
from models import User
import user_service
from tests.base import ApiTestCase


class RegisterTest(ApiTestCase):

    def test_register_returns_user_id(self):
        response = self.register("alice", "a@x.com", "pw")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()["userId"], 1)

    def test_register_missing_field_is_400(self):
        response = self.client.post('/api/register', json={"username": "alice", "password": "pw"})
        self.assertEqual(response.status_code, 400)

    def test_register_non_object_body_is_400(self):
        for body in ([1], ["alice", "a@x.com", "pw"], "alice"):
            response = self.client.post('/api/register', json=body)
            self.assertEqual(response.status_code, 400)

    def test_login_non_object_body_is_400(self):
        self.register("alice")
        response = self.client.post('/api/login', json=["alice", "pw"])
        self.assertEqual(response.status_code, 400)

    def test_register_invalid_email_is_400(self):
        response = self.register("alice", "not-an-email")
        self.assertEqual(response.status_code, 400)

    def test_duplicate_username_is_409(self):
        self.register("alice", "a@x.com")
        response = self.register("alice", "other@x.com")

        self.assertEqual(response.status_code, 409)

    def test_duplicate_email_is_409(self):
        self.register("alice", "a@x.com")
        response = self.register("bob", "a@x.com")

        self.assertEqual(response.status_code, 409)

    def test_profile_picture_accepts_legacy_key(self):
        user_id = self.register("alice", ImgLink="http://img/a.png").get_json()["userId"]
        profile = self.client.get(f'/api/users/{user_id}').get_json()

        self.assertEqual(profile["profile_picture_url"], "http://img/a.png")

    def test_password_is_not_stored_in_plaintext(self):
        user_id = user_service.register(self.session, "alice", "a@x.com", "pw")
        self.assertNotEqual(self.session.get(User, user_id).password_hash, "pw")


class LoginTest(ApiTestCase):

    def test_login_returns_token_for_registered_user(self):
        user_id = self.register("alice", "a@x.com", "pw").get_json()["userId"]
        response = self.login("alice", "pw")
        data = response.get_json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["user"], {"id": user_id, "username": "alice"})
        self.assertEqual(int(verify_token(data["token"])["sub"]), user_id)

    def test_wrong_password_and_unknown_user_look_the_same(self):
        self.register("alice")
        wrong_password = self.login("alice", "nope")
        unknown_user = self.login("mallory", "pw")

        self.assertEqual(wrong_password.status_code, 401)
        self.assertEqual(unknown_user.status_code, 401)
        self.assertEqual(wrong_password.get_json(), unknown_user.get_json())

    def test_login_missing_field_is_400(self):
        response = self.client.post('/api/login', json={"username": "alice"})
        self.assertEqual(response.status_code, 400)

    def test_service_raises_unauthorized(self):
        with self.assertRaises(Unauthorized):
            user_service.login(self.session, "nobody", "pw")


class ProfileTest(ApiTestCase):

    def test_profile_has_counts(self):
        alice_id, alice = self.signup("alice")
        bob_id, bob = self.signup("bob")
        self.client.post('/api/posts', json={"content": "hello"}, headers=alice)
        self.client.post('/api/users/follow', json={"followedId": alice_id}, headers=bob)

        response = self.client.get(f'/api/users/{alice_id}')
        profile = response.get_json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(profile["username"], "alice")
        self.assertEqual(profile["postCount"], 1)
        self.assertEqual(profile["followerCount"], 1)
        self.assertEqual(profile["followingCount"], 0)
        self.assertNotIn("password", profile)

    def test_profile_does_not_need_a_token(self):
        user_id = self.register("alice").get_json()["userId"]
        self.assertEqual(self.client.get(f'/api/users/{user_id}').status_code, 200)

    def test_unknown_user_is_404(self):
        self.assertEqual(self.client.get('/api/users/99').status_code, 404)
        with self.assertRaises(NotFound):
            user_service.get_profile(self.session, 99)


class FollowTest(ApiTestCase):

    def test_follow_then_unfollow_restores_follower_count(self):
        bob_id, _ = self.signup("bob")
        _, alice = self.signup("alice")
        before = self.client.get(f'/api/users/{bob_id}').get_json()["followerCount"]

        response = self.client.post('/api/users/follow', json={"followedId": bob_id}, headers=alice)
        self.assertEqual(response.status_code, 200)
        after_follow = self.client.get(f'/api/users/{bob_id}').get_json()["followerCount"]

        response = self.client.delete(f'/api/users/{bob_id}/unfollow', headers=alice)
        self.assertEqual(response.status_code, 200)
        after_unfollow = self.client.get(f'/api/users/{bob_id}').get_json()["followerCount"]

        self.assertEqual(after_follow, before + 1)
        self.assertEqual(after_unfollow, before)

    def test_followed_id_may_be_a_string(self):
        bob_id, _ = self.signup("bob")
        _, alice = self.signup("alice")

        response = self.client.post('/api/users/follow', json={"followedId": str(bob_id)}, headers=alice)
        self.assertEqual(response.status_code, 200)

    def test_self_follow_is_400(self):
        alice_id, alice = self.signup("alice")
        response = self.client.post('/api/users/follow', json={"followedId": alice_id}, headers=alice)
        self.assertEqual(response.status_code, 400)

    def test_self_follow_fails_even_for_unknown_user(self):
        with self.assertRaises(ValidationError):
            user_service.follow_user(self.session, 42, 42)

    def test_missing_followed_id_is_400(self):
        _, alice = self.signup("alice")
        response = self.client.post('/api/users/follow', json={}, headers=alice)
        self.assertEqual(response.status_code, 400)

    def test_duplicate_follow_is_409(self):
        bob_id, _ = self.signup("bob")
        _, alice = self.signup("alice")
        self.client.post('/api/users/follow', json={"followedId": bob_id}, headers=alice)

        response = self.client.post('/api/users/follow', json={"followedId": bob_id}, headers=alice)
        self.assertEqual(response.status_code, 409)

    def test_service_raises_conflict_on_duplicate(self):
        alice_id = user_service.register(self.session, "alice", "a@x.com", "pw")
        bob_id = user_service.register(self.session, "bob", "b@x.com", "pw")
        user_service.follow_user(self.session, alice_id, bob_id)

        with self.assertRaises(Conflict):
            user_service.follow_user(self.session, alice_id, bob_id)

    def test_following_unknown_user_is_server_error(self):
        _, alice = self.signup("alice")
        response = self.client.post('/api/users/follow', json={"followedId": 999}, headers=alice)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json(), {"message": "Internal server error."})

    def test_unfollow_without_edge_is_404(self):
        bob_id, _ = self.signup("bob")
        _, alice = self.signup("alice")

        response = self.client.delete(f'/api/users/{bob_id}/unfollow', headers=alice)
        self.assertEqual(response.status_code, 404)

    def test_is_following_reflects_edge(self):
        bob_id, _ = self.signup("bob")
        _, alice = self.signup("alice")
        url = f'/api/users/{bob_id}/is-following'

        self.assertEqual(self.client.get(url, headers=alice).get_json(), {"isFollowing": False})
        self.client.post('/api/users/follow', json={"followedId": bob_id}, headers=alice)
        self.assertEqual(self.client.get(url, headers=alice).get_json(), {"isFollowing": True})

    def test_follow_routes_need_a_token(self):
        self.assertEqual(self.client.post('/api/users/follow', json={"followedId": 1}).status_code, 401)
        self.assertEqual(self.client.delete('/api/users/1/unfollow').status_code, 401)
        self.assertEqual(self.client.get('/api/users/1/is-following').status_code, 401)
