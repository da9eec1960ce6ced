import random

import pytest

from melidash.services.ai_assistant_service import RESPONSES, AIAssistantService, classify_message
from melidash.utils.exceptions import NotFoundError, ValidationError


@pytest.fixture
def assistant(settings):
    return AIAssistantService(settings, rng=random.Random(3))


@pytest.mark.parametrize('message, topic', [
    ('What price should I set?', 'pricing'),
    ('Is this worth the COST?', 'pricing'),
    ('How do I improve my title?', 'optimization'),
    ('Any market trends this month?', 'trends'),
    ('Should I improve my price?', 'pricing'),
    ('Hello there', 'general'),
])
def test_classify_message(message, topic):
    assert classify_message(message) == topic


@pytest.mark.asyncio
async def test_insight_filters(assistant):
    assert [i['id'] for i in await assistant.get_insights()] == ['1', '2', '3']
    assert [i['id'] for i in await assistant.get_insights(type='pricing')] == ['2']
    assert [i['id'] for i in await assistant.get_insights(status='new')] == ['1', '2']
    assert [i['id'] for i in await assistant.get_insights(impact='high')] == ['1', '3']
    assert [i['id'] for i in await assistant.get_insights(product_id='MLB123456')] == ['1']
    assert await assistant.get_insight_by_id('missing') is None


@pytest.mark.asyncio
async def test_update_insight_status(assistant):
    assert (await assistant.update_insight_status('1', 'viewed'))['status'] == 'viewed'
    assert (await assistant.dismiss_insight('3'))['status'] == 'dismissed'

    with pytest.raises(ValidationError):
        await assistant.update_insight_status('1', 'archived')
    with pytest.raises(NotFoundError):
        await assistant.update_insight_status('missing', 'viewed')


@pytest.mark.asyncio
async def test_apply_recommendation(assistant):
    insight = await assistant.apply_recommendation('1', '1-1')
    assert insight['status'] == 'applied'

    with pytest.raises(NotFoundError):
        await assistant.apply_recommendation('1', '2-1')
    with pytest.raises(NotFoundError):
        await assistant.apply_recommendation('missing', '1-1')


@pytest.mark.asyncio
async def test_insight_stats_and_generation(assistant):
    stats = await assistant.get_insight_stats()
    assert stats['total'] == 3
    assert stats['by_impact'] == {'high': 2, 'medium': 1}
    assert stats['by_status'] == {'new': 2, 'viewed': 1}

    generated = await assistant.generate_new_insights()
    assert len(generated) == 1
    assert generated[0]['status'] == 'new'
    assert (await assistant.get_insights())[0]['id'] == generated[0]['id']
    assert (await assistant.get_insight_stats())['total'] == 4


@pytest.mark.asyncio
async def test_chat_conversation(assistant):
    chat = await assistant.create_chat({'topic': 'pricing'})
    assert (await assistant.get_chats())[0]['id'] == chat['id']

    reply = await assistant.send_message(chat['id'], 'What price should I set?')

    assert reply['role'] == 'assistant'
    assert reply['content'] in RESPONSES['pricing']
    stored = await assistant.get_chat_by_id(chat['id'])
    assert [m['role'] for m in stored['messages']] == ['user', 'assistant']
    assert stored['updated_at'] == reply['timestamp']


@pytest.mark.asyncio
async def test_send_message_to_unknown_chat(assistant):
    with pytest.raises(NotFoundError):
        await assistant.send_message('missing', 'hello')


@pytest.mark.asyncio
async def test_analyses(assistant):
    analysis = await assistant.create_analysis('competitor', 'MegaEletro')

    assert 60 <= analysis['analysis']['score'] <= 99
    assert (await assistant.get_analyses())[0]['id'] == analysis['id']
    assert [a['id'] for a in await assistant.get_analyses('product')] == ['1']
    assert await assistant.get_analysis_by_id(analysis['id']) is analysis

    with pytest.raises(ValidationError):
        await assistant.create_analysis('weather', 'x')


@pytest.mark.asyncio
async def test_settings(assistant):
    updated = await assistant.update_settings({'data_retention': 60})

    assert updated['data_retention'] == 60
    assert (await assistant.get_settings())['insight_frequency'] == 'daily'
