"""
Sign in, registration and the customer's own account page.
"""
import logging
from urllib.parse import urlencode

from django.contrib import messages
from django.contrib.auth import authenticate, get_user_model, login, logout, update_session_auth_hash
from django.contrib.auth.decorators import login_required
from django.db import DatabaseError
from django.db.models import Prefetch
from django.shortcuts import redirect, render
from django.urls import reverse
from django.views.decorators.http import require_POST

from .forms import LoginForm, ProfileForm, RegistrationForm
from .models import OrderDetail
from .store_utils import get_cart_count

logger = logging.getLogger(__name__)

User = get_user_model()


def _landing_for(user):
    if user.is_admin:
        return redirect('admin:index')
    return redirect('account')


def login_view(request):
    form = LoginForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        email = form.cleaned_data['email']
        password = form.cleaned_data['password']

        if not User.objects.filter(email__iexact=email).exists():
            # Unknown email: continue with registration
            return redirect(f"{reverse('register')}?{urlencode({'email': email})}")

        if password:
            user = authenticate(request, username=email, password=password)
            if user is not None:
                login(request, user)
                logger.info("User %s signed in", user.pk)
                return _landing_for(user)
            form.add_error('password', "Password incorrect")
        else:
            form.add_error('password', "Password is required")

    return render(request, 'store/login.html', {
        'form': form,
        'cart_count': get_cart_count(request),
    })


def register_view(request):
    if request.method == 'POST':
        form = RegistrationForm(request.POST)
        if form.is_valid():
            user = form.save()
            logger.info("Account created for user %s", user.pk)
            messages.success(request, "Account created successfully! You can now sign in.")
            return redirect('login')
    else:
        form = RegistrationForm(initial={'email': request.GET.get('email', '')})

    return render(request, 'store/register.html', {
        'form': form,
        'cart_count': get_cart_count(request),
    })


@require_POST
def logout_view(request):
    logout(request)
    return redirect('login')


# -------------------------------
# Account page
# -------------------------------
@login_required
def account(request):
    orders = request.user.orders.prefetch_related(
        Prefetch('details', queryset=OrderDetail.objects.select_related('variant__product'))
    ).order_by('-created_at')

    return render(request, 'store/account.html', {
        'profile_form': ProfileForm(initial={
            'full_name': request.user.full_name,
            'phone_number': request.user.phone_number,
            'date_of_birth': request.user.date_of_birth,
            'gender': request.user.gender,
            'address': request.user.address,
        }),
        'orders': orders,
        'cart_count': get_cart_count(request),
    })


@login_required
@require_POST
def update_profile(request):
    form = ProfileForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Please provide a valid name.")
        return redirect('account')

    user = form.save(request.user)
    if form.cleaned_data['password']:
        # keep the user signed in after a password change
        update_session_auth_hash(request, user)
    messages.success(request, "Profile updated.")
    return redirect('account')


@login_required
@require_POST
def delete_account(request):
    user = request.user
    user_id = user.pk
    try:
        user.delete()
    except DatabaseError:
        logger.exception("Failed to delete account for user %s", user_id)
        messages.error(request, "Failed to delete account. Please try again later.")
        return redirect('account')

    request.session.flush()
    logger.info("Account %s deleted by its owner", user_id)
    messages.success(request, "Your account has been successfully deleted.")
    return redirect('login')
