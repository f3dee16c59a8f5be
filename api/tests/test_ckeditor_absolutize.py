import re

from django.conf import settings
from django.test import SimpleTestCase, TestCase

from api.models.models_auth import CustomUser
from api.models.models_course import Course, CourseModule
from api.serializers.serializers_course import CourseModuleSerializer
from api.utils.ckeditor_paths import absolutize_media_urls


def first_src(html):
    m = re.search(r'src=["\'](.*?)["\']', html)
    return m.group(1) if m else None


class TestAbsolutizeHelper(SimpleTestCase):
    def test_absolutizes_media_url_without_request(self):
        html = '<p><img src="/media/uploads/ckeditor/diagram.png" alt="x"></p>'
        expected = settings.SITE_BASE_URL.rstrip("/") + "/media/uploads/ckeditor/diagram.png"
        self.assertEqual(first_src(absolutize_media_urls(html, request=None)), expected)

    def test_leaves_absolute_and_non_media_urls(self):
        html = '<p><img src="https://cdn.example.com/media/x.png" /><img src="/static/logo.png" /></p>'
        self.assertEqual(absolutize_media_urls(html, request=None), html)

    def test_empty_values_pass_through(self):
        self.assertEqual(absolutize_media_urls("", request=None), "")
        self.assertIsNone(absolutize_media_urls(None, request=None))


class TestModuleDescriptionRendering(TestCase):
    def test_module_description_images_are_absolute(self):
        instructor = CustomUser.objects.create_user(
            email="teach@example.com", password="StrongPass1!", first_name="T", last_name="U",
            role=CustomUser.Role.INSTRUCTOR, is_approved=True,
        )
        course = Course.objects.create(title="C", description="C", course_code="C1", instructor=instructor)
        module = CourseModule.objects.create(
            course=course, title="Week 1", order=1,
            description='<p><img src="media/uploads/ckeditor/week1.png"></p>',
        )

        rendered = CourseModuleSerializer(module).data["description"]
        expected = settings.SITE_BASE_URL.rstrip("/") + "/media/uploads/ckeditor/week1.png"
        self.assertEqual(first_src(rendered), expected)
