from fastapi.testclient import TestClient
from wardwatch.core.settings import settings
from wardwatch.main import app

with TestClient(app) as client:
    print('ROOT:')
    print(client.get('/').json())

    print('\nHEALTH:')
    print(client.get(f'{settings.API_PREFIX}/health').json())

    print('\nDB HEALTH:')
    try:
        resp = client.get(f'{settings.API_PREFIX}/health/db')
        print(resp.status_code)
        try:
            print(resp.json())
        except Exception:
            print(resp.text)
    except Exception as e:
        print('DB call raised exception:', e)
