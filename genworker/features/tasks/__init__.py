"""
Generative AI Tasks Feature
생성형 AI 작업 큐 처리
"""
