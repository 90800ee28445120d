"""
Auth and role tests:
- register (students/teachers only), login, me
- role guards on exam endpoints
"""
from django.test import TestCase
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import User


class AuthFlowTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_register_defaults_to_student(self):
        res = self.client.post(
            "/api/auth/register",
            {"email": "new@test.az", "password": "pass123", "fullName": "New Student"},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["user"]["role"], User.ROLE_STUDENT)
        self.assertIn("accessToken", res.data)
        self.assertIn("refreshToken", res.data)

    def test_register_teacher(self):
        res = self.client.post(
            "/api/auth/register",
            {"email": "t@test.az", "password": "pass123", "fullName": "Teacher", "role": "TEACHER"},
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(User.objects.get(email="t@test.az").role, User.ROLE_TEACHER)

    def test_register_admin_rejected(self):
        res = self.client.post(
            "/api/auth/register",
            {"email": "a@test.az", "password": "pass123", "fullName": "Admin", "role": "ADMIN"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["field"], "role")
        self.assertFalse(User.objects.filter(email="a@test.az").exists())

    def test_register_duplicate_email(self):
        User.objects.create_user(email="dup@test.az", password="pass123", full_name="Dup")
        res = self.client.post(
            "/api/auth/register",
            {"email": "DUP@test.az", "password": "pass123", "fullName": "Dup Again"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["field"], "email")

    def test_login_and_me(self):
        User.objects.create_user(email="s@test.az", password="pass123", full_name="Student")
        res = self.client.post("/api/auth/login", {"email": "s@test.az", "password": "pass123"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {res.data['accessToken']}")
        me = self.client.get("/api/auth/me")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.data["email"], "s@test.az")
        self.assertEqual(me.data["fullName"], "Student")

    def test_login_wrong_password(self):
        User.objects.create_user(email="s@test.az", password="pass123", full_name="Student")
        res = self.client.post("/api/auth/login", {"email": "s@test.az", "password": "nope"}, format="json")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["code"], "invalid_credentials")

    def test_me_without_token(self):
        res = self.client.get("/api/auth/me")
        self.assertEqual(res.status_code, 401)

    def test_garbage_token(self):
        self.client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")
        res = self.client.get("/api/auth/me")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["code"], "unauthenticated")


class RoleGuardTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.teacher = User.objects.create_user(
            email="teacher@test.az", password="pass123", full_name="Teacher", role=User.ROLE_TEACHER,
        )
        self.student = User.objects.create_user(
            email="student@test.az", password="pass123", full_name="Student", role=User.ROLE_STUDENT,
        )

    def _auth_header(self, user: User) -> dict:
        token = str(AccessToken.for_user(user))
        return {"HTTP_AUTHORIZATION": f"Bearer {token}"}

    def test_student_cannot_author_exams(self):
        self.client.credentials(**self._auth_header(self.student))
        res = self.client.post("/api/exams", {}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_teacher_cannot_answer(self):
        self.client.credentials(**self._auth_header(self.teacher))
        res = self.client.post("/api/attempts/1/answers", {"questionId": 1}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_teacher_cannot_submit(self):
        self.client.credentials(**self._auth_header(self.teacher))
        res = self.client.post("/api/attempts/1/submit")
        self.assertEqual(res.status_code, 403)
