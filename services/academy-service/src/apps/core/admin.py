# services/academy-service/src/apps/core/admin.py
from django import forms
from django.contrib import admin

from .models import (
    Course,
    Chapter,
    ChapterProgress,
    Exam,
    ExamQuestion,
    ExamAttempt,
    Affiliate,
    Commission,
    Payout,
)
from .services import ExamAuthoringService
from .services.exceptions import AcademyServiceError


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['title', 'slug', 'is_published', 'created_at']
    list_filter = ['is_published']
    search_fields = ['title', 'slug']
    prepopulated_fields = {'slug': ('title',)}


@admin.register(Chapter)
class ChapterAdmin(admin.ModelAdmin):
    list_display = ['title', 'course', 'sort_order', 'is_published']
    list_filter = ['is_published']
    search_fields = ['title']
    ordering = ['course', 'sort_order']


@admin.register(ChapterProgress)
class ChapterProgressAdmin(admin.ModelAdmin):
    list_display = ['student_id', 'course', 'chapter', 'completed', 'progress_percent', 'updated_at']
    list_filter = ['completed']
    search_fields = ['student_id']
    ordering = ['-updated_at']


class ExamAdminForm(forms.ModelForm):
    class Meta:
        model = Exam
        fields = ['course', 'title', 'description', 'passing_percentage', 'is_enabled']

    def clean_is_enabled(self):
        enabled = self.cleaned_data.get('is_enabled')
        if enabled and (self.instance.pk is None or not self.instance.questions.exists()):
            raise forms.ValidationError('Cannot enable an exam without questions')
        return enabled


class ExamQuestionAdminForm(forms.ModelForm):
    class Meta:
        model = ExamQuestion
        fields = ['exam', 'question_text', 'options', 'correct_option_index', 'sort_order']

    def clean(self):
        cleaned_data = super().clean()
        try:
            cleaned_data['options'] = ExamAuthoringService.validate_question(
                cleaned_data.get('question_text'),
                cleaned_data.get('options'),
                cleaned_data.get('correct_option_index'),
            )
        except AcademyServiceError as e:
            raise forms.ValidationError(e.message)
        return cleaned_data


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    form = ExamAdminForm
    list_display = ['title', 'course', 'passing_percentage', 'is_enabled', 'question_count']
    list_filter = ['is_enabled']
    search_fields = ['title', 'course__title']


@admin.register(ExamQuestion)
class ExamQuestionAdmin(admin.ModelAdmin):
    form = ExamQuestionAdminForm
    list_display = ['exam', 'sort_order', 'question_text']
    search_fields = ['question_text']
    ordering = ['exam', 'sort_order']

    def delete_model(self, request, obj):
        ExamAuthoringService.remove_question(obj.id)

    def delete_queryset(self, request, queryset):
        for question in queryset:
            ExamAuthoringService.remove_question(question.id)


@admin.register(ExamAttempt)
class ExamAttemptAdmin(admin.ModelAdmin):
    list_display = ['student_id', 'exam', 'score', 'total_questions', 'percentage', 'passed', 'created_at']
    list_filter = ['passed']
    search_fields = ['student_id']
    ordering = ['-created_at']

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Affiliate)
class AffiliateAdmin(admin.ModelAdmin):
    list_display = ['referral_code', 'student_id', 'is_active', 'pending_balance_cents', 'paid_balance_cents', 'referral_count', 'link_clicks']
    list_filter = ['is_active']
    search_fields = ['referral_code', 'student_id', 'paypal_email']
    readonly_fields = ['pending_balance_cents', 'paid_balance_cents', 'total_earnings_cents', 'referral_count', 'link_clicks']


@admin.register(Commission)
class CommissionAdmin(admin.ModelAdmin):
    list_display = ['affiliate', 'referred_student_id', 'subscription_amount_cents', 'commission_cents', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['affiliate__referral_code', 'referred_student_id', 'payment_reference']
    ordering = ['-created_at']


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ['affiliate', 'amount_cents', 'payment_method', 'status', 'created_at', 'processed_at']
    list_filter = ['status', 'payment_method']
    search_fields = ['affiliate__referral_code']
    ordering = ['-created_at']
